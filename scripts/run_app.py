#!/usr/bin/env python
"""
Validate the catalog, then run the Streamlit package price preview.

Usage:
    python scripts/run_app.py [--port 8501] [--skip-validation]
"""
import argparse
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from package_pricing.config.settings import get_settings
from package_pricing.data.load_catalog import validate_catalog_file


def check_catalog(catalog_path: Path) -> bool:
    """Print the catalog validation report; False when the preview cannot load it."""
    report = validate_catalog_file(catalog_path)

    for error in report["errors"]:
        print(f"  ❌ {error}")
    for warning in report["warnings"]:
        print(f"  ⚠️ {warning}")

    if report["status"] != "success":
        return False

    metrics = report["metrics"]
    print(f"  ✅ {metrics['item_count']} items in {metrics['section_count']} sections "
          f"({metrics['hourly_items']} billed per hour)")
    return True


def main():
    parser = argparse.ArgumentParser(description="Run the package price preview")
    parser.add_argument("--port", type=int, default=8501)
    parser.add_argument("--skip-validation", action="store_true")
    args = parser.parse_args()

    settings = get_settings()
    ui_path = Path(__file__).parent.parent / 'src' / 'package_pricing' / 'ui' / 'app_streamlit.py'

    if not args.skip_validation:
        print(f"Checking catalog {settings.catalog_csv}...")
        if not check_catalog(settings.catalog_csv):
            print("\n❌ Catalog is not usable, fix it or pass --skip-validation")
            sys.exit(1)

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), '--server.port', str(args.port)]
    print(f"Starting package price preview on port {args.port}")

    try:
        subprocess.run(cmd, cwd=str(settings.project_root))
    except KeyboardInterrupt:
        print("\nPreview stopped.")


if __name__ == "__main__":
    main()
