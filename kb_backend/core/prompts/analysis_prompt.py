"""
Uploaded file analysis prompt.

Asks the model to classify one file from its name, MIME type and size and
to answer with a JSON object {type, summary, key_topics, data_classification}.
"""

from langchain_core.prompts import PromptTemplate

from kb_backend.core.prompts.registry import resolve_prompt

ANALYSIS_PROMPT_NAME = "kb-file-analysis"

ANALYSIS_PROMPT = PromptTemplate.from_template(
    """You are assisting in preparing commercial pharmaceutical data for downstream analysis on an AI-native intelligence platform. Your role is to contextualize this document for pharmaceutical commercial teams who need actionable business intelligence.

File Information:
- Filename: {filename}
- File Type: {content_type}
- File Size: {size} bytes

Analysis Instructions:
1. Summarize the document's commercial relevance in 2-3 sentences, focusing on key points that matter to pharma commercial teams
2. Identify which commercial intelligence themes are present in this document
3. Extract business context that supports executive decision-making
4. Classify the data type based on its commercial application

Commercial Intelligence Themes to Identify:
- Market Access (payor coverage, formulary positioning, access barriers)
- HEOR (Health Economics & Outcomes Research, cost-effectiveness)
- Omnichannel Engagement (HCP interactions, digital touchpoints)
- Patient Journey (treatment pathways, patient flow analysis)
- Physician Profiling (prescriber behavior, targeting insights)
- Pricing/GTN (gross-to-net, pricing strategy, rebates)
- Contracting/Compliance (managed care contracts, regulatory compliance)
- Forecasting (demand planning, market projections)
- Competitive Intelligence (market share, competitor analysis)
- Brand Performance (launch metrics, sales performance)

Return a JSON response with this exact structure:
{{
  "type": "Commercial document type (e.g., 'Market Access Analysis', 'Brand Performance Dashboard', 'Payor Coverage Report')",
  "summary": "Direct, confident 2-3 sentence description focusing on commercial relevance and the business decisions this data supports. Start with strong action words like 'Enables', 'Supports', 'Provides', 'Analyzes'",
  "key_topics": ["3-5 commercial intelligence topics from the themes above that are most relevant"],
  "data_classification": "Commercial classification (e.g., 'Market Access Intelligence', 'Brand Performance Data', 'HEOR Evidence', 'Commercial Analytics')"
}}

IMPORTANT: Focus on commercial intelligence value and business impact. Each element should support downstream decision-making for pharmaceutical commercial teams."""
)


def get_analysis_prompt(use_registry: bool = False, label: str | None = None) -> PromptTemplate:
    return resolve_prompt(ANALYSIS_PROMPT_NAME, ANALYSIS_PROMPT, use_registry=use_registry, label=label)
