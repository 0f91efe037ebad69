"""
Clinic lipid decision-support package.

Design intent:
- Keep the decision core (text/extraction/risk/eligibility) pure and stateless.
- Keep the API and scripts as thin orchestration over the core.
"""
