"""The ``todotxt`` console script."""

__all__ = ["main"]


def main():
    """Run the click group; imported lazily so the library stays free of click and rich."""
    from .tasks import cli

    cli(obj={})
