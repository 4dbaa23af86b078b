#!/usr/bin/env python3
"""Tests for settings resolution and YAML config loading."""
import os
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from cloudmetrics.config import Config, load_config, resolve_settings

REPO_ROOT = Path(__file__).resolve().parent.parent


def test_resolve_settings_defaults():
    """Unset and empty variables fall back to the placeholders."""
    print("Testing settings fallbacks...")

    for environ in ({}, {"GOOGLE_CLOUD_PROJECT": "", "FUNCTION_NAME": ""}):
        settings = resolve_settings(environ)
        assert settings.project_id == "p48-development"
        assert settings.function_name == "Buy"
        assert settings.project_name == "projects/p48-development"
    print("  ✓ placeholders")


def test_resolve_settings_from_env():
    settings = resolve_settings({"GOOGLE_CLOUD_PROJECT": "shop-prod", "FUNCTION_NAME": "Checkout"})
    assert settings.project_id == "shop-prod"
    assert settings.function_name == "Checkout"
    assert settings.project_name == "projects/shop-prod"


def test_load_example_config():
    """The shipped config loads."""
    print("\nTesting config loading...")

    config = load_config(str(REPO_ROOT / "configs" / "default.yaml"))
    assert isinstance(config, Config)
    assert config.emitter.timeout_s == 10
    assert config.emitter.default_labels == {"source": "cli"}
    assert config.self_metrics.enabled is False
    print("  ✓ configs/default.yaml")


def test_load_config_errors():
    try:
        load_config("/nonexistent/cloudmetrics.yaml")
    except FileNotFoundError:
        pass
    else:
        raise AssertionError("missing file should raise FileNotFoundError")

    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
        f.write("emitter:\n  timeout_s: -1\n")
        path = f.name
    try:
        load_config(path)
    except ValueError as e:
        assert "validation failed" in str(e)
    else:
        raise AssertionError("negative timeout should fail validation")
    finally:
        os.unlink(path)


def test_log_level_override():
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as f:
        f.write("")
        path = f.name
    previous = os.environ.get("LOG_LEVEL")
    os.environ["LOG_LEVEL"] = "DEBUG"
    try:
        config = load_config(path)
        assert config.global_.log_level == "DEBUG"
    finally:
        if previous is None:
            del os.environ["LOG_LEVEL"]
        else:
            os.environ["LOG_LEVEL"] = previous
        os.unlink(path)


def main():
    """Run all tests."""
    tests = [
        test_resolve_settings_defaults,
        test_resolve_settings_from_env,
        test_load_example_config,
        test_load_config_errors,
        test_log_level_override,
    ]

    failed = 0
    for test in tests:
        try:
            test()
        except Exception as e:
            print(f"  ✗ {test.__name__} failed: {e}")
            failed += 1

    print(f"\nResults: {len(tests) - failed} passed, {failed} failed")
    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
