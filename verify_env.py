import asyncio
import os
import tempfile

import aiosmtplib
import httpx
from dotenv import load_dotenv

from src.core.config import get_settings
from src.core.store import DocumentStore

# 1. Load the .env file
load_dotenv()

settings = get_settings()


async def verify_store():
    print("-" * 30)
    print(f"🔍 Checking document store at {settings.store_path} ...")
    store = DocumentStore(settings.store_path)
    try:
        store.ensure()
        document = store.read()
    except OSError as e:
        print(f"❌ Store is not writable: {e}")
        return False
    print(
        f"✅ Store readable: {len(document.appointments)} appointments, "
        f"{len(document.blocked_dates)} blocked dates, slot capacity {document.settings.slot_capacity}"
    )
    return True


async def verify_uploads():
    print("-" * 30)
    print(f"🔍 Checking uploads directory {settings.uploads_dir} ...")
    try:
        settings.uploads_dir.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(dir=settings.uploads_dir):
            pass
    except OSError as e:
        print(f"❌ Uploads directory is not writable: {e}")
        return False
    print("✅ Uploads directory is writable")
    return True


async def verify_smtp():
    print("-" * 30)
    if not settings.smtp_configured:
        print("ℹ️  SMTP is not configured, emails will report not_configured")
        return True

    print(f"🔍 Connecting to SMTP {settings.smtp_host}:{settings.smtp_port} ...")
    client = aiosmtplib.SMTP(
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        use_tls=settings.smtp_port == 465,
        timeout=settings.smtp_timeout_seconds,
    )
    try:
        await client.connect()
        await client.login(settings.smtp_user, settings.smtp_pass)
        await client.quit()
    except (aiosmtplib.SMTPException, OSError) as e:
        print(f"❌ SMTP check failed: {e}")
        return False
    print("✅ SMTP login succeeded")
    return True


async def verify_rates():
    print("-" * 30)
    print(f"🔍 Fetching rates from {settings.rates_api_url} ...")
    try:
        async with httpx.AsyncClient(timeout=settings.rates_timeout_seconds) as client:
            response = await client.get(settings.rates_api_url)
            response.raise_for_status()
            rates = response.json().get("rates") or {}
    except (httpx.HTTPError, ValueError) as e:
        print(f"❌ Rate API request failed: {e}")
        return False

    if settings.local_currency not in rates:
        print(f"❌ Rate API response has no {settings.local_currency} rate, quotes will be empty")
        return False
    print(f"✅ Rate API returned {len(rates)} currencies including {settings.local_currency}")
    return True


async def main():
    print("🚀 Verifying environment configuration...")
    print(f"ℹ️  PUBLIC_BASE_URL: {settings.public_base_url}")
    print(f"ℹ️  CLOSED_WEEKDAYS: {list(settings.closed_weekdays)} (0 = Sunday)")
    if os.getenv("PUBLIC_BASE_URL") is None:
        print("⚠️  PUBLIC_BASE_URL is unset, emailed links will point at localhost")

    results = [
        await verify_store(),
        await verify_uploads(),
        await verify_smtp(),
        await verify_rates(),
    ]

    print("-" * 30)
    if all(results):
        print("🎉 All checks passed.")
    else:
        print("⚠️  Some checks failed, review the .env file and network access.")


if __name__ == "__main__":
    asyncio.run(main())
