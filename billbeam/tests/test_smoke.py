"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import billbeam
    import billbeam.application
    import billbeam.cli.main
    import billbeam.domain
    import billbeam.receipt
    import billbeam.runtime

    assert billbeam.__version__
    assert billbeam.application is not None
    assert billbeam.cli.main is not None
    assert billbeam.domain is not None
    assert billbeam.receipt is not None
    assert billbeam.runtime is not None
