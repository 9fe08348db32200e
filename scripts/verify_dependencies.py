#!/usr/bin/env python3
"""
Dependency Verification Script
Imports every runtime and test dependency and reports which ones are missing.
"""

import sys
from importlib import import_module

# Runtime and test dependencies to verify
DEPENDENCIES = [
    ("pydantic", "Pydantic"),
    ("structlog", "Structlog"),
    ("jsonlines", "Jsonlines"),
    ("rich", "Rich"),
    ("pytest", "Pytest"),
    ("pytest_asyncio", "pytest-asyncio"),
    ("pytest_mock", "pytest-mock"),
]


def verify_imports():
    """Verify all dependency imports work; exit 1 if any fail."""
    failed = []

    print("Verifying dependencies...\n")

    for module_name, display_name in DEPENDENCIES:
        try:
            import_module(module_name)
            print(f"[OK] {display_name}")
        except ImportError as e:
            print(f"[FAILED] {display_name}: {e}")
            failed.append(display_name)

    print(f"\n{'='*60}")

    if failed:
        print(f"[ERROR] {len(failed)} dependencies failed:")
        for name in failed:
            print(f"   - {name}")
        sys.exit(1)

    print("[SUCCESS] All dependencies verified successfully!")
    sys.exit(0)


if __name__ == "__main__":
    verify_imports()
