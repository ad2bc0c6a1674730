"""Domain core: session state, prompts, generation, retrieval and decoding."""
