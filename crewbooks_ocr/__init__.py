"""CrewBooks OCR normalization.

Turns an OCR provider's output for an uploaded receipt or payroll paystub
(structured fields plus a raw transcript) into a canonical record used to
pre-fill expense and income entries for film/TV freelancers.
"""

__version__ = "0.1.0"
