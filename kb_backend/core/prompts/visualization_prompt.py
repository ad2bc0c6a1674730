"""
Visualization set generation prompt.

Asks the model for four executive-level charts over sampled knowledge
base content and upload metadata, answered as one JSON object.
"""

from langchain_core.prompts import PromptTemplate

from kb_backend.core.prompts.registry import resolve_prompt

VISUALIZATION_PROMPT_NAME = "kb-visualization-set"

VISUALIZATION_PROMPT = PromptTemplate.from_template(
    """You are a strategic commercial intelligence analyst helping pharmaceutical executives make data-driven decisions. Your task is to analyze commercial data and generate executive-ready visualizations that identify trends, anomalies, and strategic opportunities.

COMMERCIAL DATA ANALYZED:
{documents}

FILE METADATA:
{files}

Based on the above commercial intelligence data, generate FOUR executive-level visualizations that provide actionable insights for pharmaceutical commercial leadership. Focus on business impact and strategic decision-making rather than technical analysis.

Each visualization should:
- Highlight key trends impacting brand performance
- Identify anomalies or deviations from expected metrics
- Surface strategic opportunities or risks
- Provide clear next-best-action recommendations

Your response must follow this exact JSON format:

{{
  "title": "A specific, descriptive title based on the actual data analyzed",
  "description": "A specific description based on the actual data and insights found",
  "summary": "Executive summary of the key findings across all visualizations (2-3 sentences)",
  "visualizations": [
    {{
      "id": "viz1",
      "title": "Clear, concise chart title",
      "description": "Brief description of what the chart shows",
      "insights": [
        "Executive insight: Business trend or performance impact",
        "Strategic insight: Market opportunity or competitive advantage",
        "Commercial insight: Revenue or growth implication"
      ],
      "chartType": "bar",
      "chartData": {{
        "labels": ["Label1", "Label2", "Label3"],
        "datasets": [
          {{
            "label": "Dataset name",
            "data": [10, 20, 30],
            "backgroundColor": ["#1f77b4", "#ff7f0e", "#2ca02c"],
            "borderColor": "#333333",
            "fill": true
          }}
        ]
      }},
      "recommendations": [
        "Strategic action: Specific next-best-action for the commercial team",
        "Tactical recommendation: Immediate step to capitalize on the insight"
      ]
    }}
  ]
}}

Use chartType "bar" for the first visualization, "line" for the second, "pie" for the third and "radar" for the fourth. Scatter charts use {{"x": number, "y": number}} points as data.

IMPORTANT GUIDELINES:
1. Generate realistic commercial metrics based on pharmaceutical business context
2. Use executive-friendly language: concise and actionable
3. Each insight should highlight business implications (revenue, market share, competitive position)
4. Recommendations must be specific next-best-actions for commercial teams
5. Use professional color schemes
6. Ensure the JSON is valid and contains numbers only in data arrays"""
)


def get_visualization_prompt(use_registry: bool = False, label: str | None = None) -> PromptTemplate:
    return resolve_prompt(VISUALIZATION_PROMPT_NAME, VISUALIZATION_PROMPT, use_registry=use_registry, label=label)
