"""
Chart series backend.

Stateless transforms that turn raw ``{value, timestamp}`` records into
display-ready chart series: parsing, range filtering, normalization modes,
6-month display bands and the percentile-based YES% mapping. The FastAPI
application exposing them is defined in ``app.py``.
"""
