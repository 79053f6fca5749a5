"""Smoke tests for basic module wiring."""

from __future__ import annotations


def test_imports() -> None:
    import assetscan
    import assetscan.application.records
    import assetscan.cli.main
    import assetscan.domain
    import assetscan.runtime
    import assetscan.runtime.scan_server

    assert assetscan is not None
    assert assetscan.application.records is not None
    assert assetscan.cli.main is not None
    assert assetscan.domain is not None
    assert assetscan.runtime is not None
    assert assetscan.runtime.scan_server.app is not None
