#!/usr/bin/env python3
"""
YouTube Viral Analyzer - Setup Checker
======================================
Verifies that dependencies are installed and secrets are configured.
"""

import sys


def check_import(module_name, package_name=None):
    """Try to import a module and report status"""
    package_name = package_name or module_name
    try:
        __import__(module_name)
        print(f"  [OK] {package_name}")
        return True
    except ImportError:
        print(f"  [X]  {package_name} - Not installed")
        return False


def check_secrets():
    """Check that the required secrets are configured. Returns False if login is impossible."""
    import config

    print("\nSecrets:")

    if config.APP_PASSWORD:
        print("  [OK] APP_PASSWORD")
    else:
        print("  [X]  APP_PASSWORD - Not configured (login disabled)")

    if config.OPENAI_API_KEY:
        print("  [OK] OPENAI_API_KEY")
    else:
        print("  [!]  OPENAI_API_KEY - Not configured (analysis and generation disabled)")

    cdn_keys = {
        'BUNNY_STORAGE_ZONE': config.BUNNY_STORAGE_ZONE,
        'BUNNY_ACCESS_KEY': config.BUNNY_ACCESS_KEY,
        'BUNNY_CDN_HOST': config.BUNNY_CDN_HOST,
    }
    missing = [key for key, value in cdn_keys.items() if not value]
    if missing:
        print(f"  [!]  Bunny CDN - Missing {', '.join(missing)} (temporary image URLs only)")
    else:
        print("  [OK] Bunny CDN")

    return bool(config.APP_PASSWORD)


def check_environment():
    import config

    print("\nEnvironment:")
    print(f"  ENVIRONMENT = {config.ENVIRONMENT}")
    if config.ENVIRONMENT != "production":
        print("  [!]  Session cookie is not marked Secure outside production")
    if config.TRUSTED_PROXY_HEADER:
        print(f"  [!]  Client IP taken from {config.TRUSTED_PROXY_HEADER} - the proxy must overwrite it")
    else:
        print("  [OK] Client IP taken from the socket peer")
    if config.TRUST_FORWARDED_FOR:
        print("  [!]  X-Forwarded-For is trusted - only enable behind a proxy that overwrites it")


def main():
    print("=" * 60)
    print("YouTube Viral Analyzer - Setup Check")
    print("=" * 60)

    all_ok = True

    # Core dependencies
    print("\nWeb Server:")
    all_ok &= check_import('fastapi', 'FastAPI')
    all_ok &= check_import('uvicorn', 'Uvicorn')
    all_ok &= check_import('jinja2', 'Jinja2')
    all_ok &= check_import('multipart', 'python-multipart')
    all_ok &= check_import('dotenv', 'python-dotenv')

    print("\nAI and Images:")
    all_ok &= check_import('openai', 'OpenAI')
    all_ok &= check_import('PIL', 'Pillow')
    all_ok &= check_import('requests', 'Requests')

    if all_ok:
        all_ok &= check_secrets()
        check_environment()

    # Summary
    print("\n" + "=" * 60)
    if all_ok:
        print("Setup OK!")
        print("\nTo start the web interface:")
        print("  python main.py --serve")
    else:
        print("Setup incomplete.")
        print("\nInstall missing packages with:")
        print("  pip install -e .")
    print("=" * 60)

    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
