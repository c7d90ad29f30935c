"""Still and reel exports for photo carousels."""

__all__ = ["run_export"]


def run_export(*args, **kwargs):
    from .export import run_export as _run_export

    return _run_export(*args, **kwargs)
