EXTRACTION_SYSTEM = """
You are an expert at extracting structured data from natural language requests for Jira
issue creation. Pay special attention to project names that appear after location words
like "in", "for", "to". Always respond with valid JSON only.
""".strip()

EXTRACTION_HUMAN_TEMPLATE = """
Analyze this user request for creating a Jira issue and extract parameters:

"{utterance}"

Extract these parameters ONLY if they are clearly and explicitly mentioned:

TITLE: The issue title/summary (exact text in quotes, or clear subject)
TYPE: Must be exactly one of: {issue_types}
PROJECT: Project name ONLY if mentioned with "in", "for", "to" keywords, or marked as
[PROJECT:...]. Valid project names: {projects}
Accepted shorthands: {project_aliases}
PRIORITY: Must be exactly one of: {priorities}
DESCRIPTION: Detailed explanation, steps to reproduce, or additional context
(usually after "description is" or "whose description is")

DO NOT extract project from description text or other parts of the sentence.
Only from location indicators.

Confidence scoring (0.0-1.0):
- 1.0: Explicitly stated with clear keywords
- 0.8: Strongly implied with high certainty
- 0.6: Reasonably inferred from context
- 0.4: Weakly suggested
- 0.2: Very uncertain
- 0.0: Not mentioned or completely unclear

RESPOND WITH VALID JSON ONLY:
{{
  "title": {{ "value": "extracted title" | null, "confidence": 0.9 }},
  "type": {{ "value": "Bug" | null, "confidence": 0.8 }},
  "project": {{ "value": "FV Engineering" | null, "confidence": 0.7 }},
  "priority": {{ "value": "High" | null, "confidence": 0.6 }},
  "description": {{ "value": "extracted description" | null, "confidence": 0.5 }}
}}

Examples:
- "Create a bug called 'Login broken'" -> title: "Login broken", type: "Bug"
- "High priority task for demo project" -> type: "Task", priority: "High", project: null
- "Make an issue in FV Engineering about API timeout" -> title: "API timeout", project: "FV Engineering"

DO NOT invent information. Only extract what is clearly present. Use null for missing parameters.
"""
