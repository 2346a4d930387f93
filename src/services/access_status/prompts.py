"""
Provider prompts.

Wording only; the pipeline depends on the JSON shapes described here,
not on the phrasing.
"""

from __future__ import annotations

from collections.abc import Sequence

RESOLVER_SYSTEM_PROMPT = "You are a precise resolver that always outputs valid JSON only."

ENRICHMENT_SYSTEM_PROMPT = (
    "You are a precise legal/medical data provider. Always output valid JSON only."
)


def resolver_user_prompt(raw_query: str) -> str:
    """Prompt asking the resolver to map free text to a substance name."""
    return f"""
You are resolving a user's free-form input into a drug or psychoactive substance name.

Rules:
1. Always return a strict JSON object with these keys:
   - "resolved_name": the most common, widely recognized short form or everyday name.
     - Must be concise, human-readable, and not an IUPAC string.
     - Examples: "Ketamine", "LSD", "MDMA", "Psilocybin".
   - "canonical_name": the International Nonproprietary Name (INN) if one exists,
     otherwise the main pharmacological or scientific name.

2. If you cannot confidently resolve the input, return:
{{"resolved_name": null, "message": "No known record of '<user_input>'"}}

3. Output strictly valid JSON only, with no text before or after.

Examples:
Input: "molly"
Output: {{"resolved_name":"MDMA","canonical_name":"3,4-methylenedioxymethamphetamine"}}

Input: "acid"
Output: {{"resolved_name":"LSD","canonical_name":"lysergide"}}

Input: "randomword123"
Output: {{"resolved_name":null,"message":"No known record of 'randomword123'"}}

Now resolve this input: "{raw_query}"
"""


def enrichment_user_prompt(substance: str, jurisdictions: Sequence[str]) -> str:
    """Prompt asking for the access status of one substance in every jurisdiction."""
    return f"""
For the substance "{substance}", determine its *current* legal or medical access status in the following countries:
{", ".join(jurisdictions)}

Respond ONLY in strict JSON as an object. Each key should be a country ISO 3166-1 alpha-2 code (e.g., "US", "CA"), and each value should be an object with:
- "access_status": one of:
  - "Approved Medical Use"
  - "Banned"
  - "Limited Access Trials"
  - "Unknown"
- "reference_link": a trustworthy URL to a credible legal or government source that supports the status, or null.

Example valid JSON:
{{
  "US": {{ "access_status": "Approved Medical Use", "reference_link": "https://www.fda.gov/..." }},
  "CA": {{ "access_status": "Banned", "reference_link": "https://laws-lois.justice.gc.ca/..." }}
}}
"""
