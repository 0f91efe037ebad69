"""
HTTP boundary for clinic decision support.

Design intent:
- Expose thin, typed endpoints over the annotation, risk and eligibility layers.
- Keep request validation explicit and failure modes predictable.
"""
