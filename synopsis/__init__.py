"""
Synopsis - summarize articles of any length with local or remote models.

Entry points:
    synopsis.summarizer.summarize(text, BackendConfig(...), on_progress=None)
    python -m synopsis.main --input article.txt
"""
