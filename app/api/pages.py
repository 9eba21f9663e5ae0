HEADER = '<div style="font-family:monospace; text-align: center; zoom: 1.5; padding-left: 3vw; padding-top:20vh;">'

def page(body: str) -> str:
    """Wrap a fragment in the shared centered layout."""
    return f"<!DOCTYPE html>\n<html><body>\n{HEADER}\n{body}\n</div>\n</body></html>\n"
