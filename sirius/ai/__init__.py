"""
AI Module - natural language understanding for Sirius.

Module Structure:
================
- providers/: Hosted LLM clients (Gemini, OpenAI, Anthropic)
- intent/: Wake-word gate and the intent resolver
- prompts/: The instruction template sent with every utterance
- schemas/: ResolverOutcome and reply normalization
- monitoring/: Logging and usage counters for model calls

Flow:
=====
1. User: "Sirius, open the garage"
2. WakeWordGate: addressed, command = "open the garage"
3. IntentResolver (LLM): {"type": "action", "command": {"action": "open", "target": "garage"}}
4. Device gateway: GET /api/garage/open
"""

__version__ = "0.1.0"
