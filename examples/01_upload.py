"""
Upload a release APK to Pgyer
"""
import asyncio
import os
from pathlib import Path

from pgyerpy import PgyerClient, UploadSettings, setup_logging


async def main():
    setup_logging()
    settings = UploadSettings.from_env()
    
    async with PgyerClient() as pgyer:
        # Pick the single APK from the Gradle output directory
        apk = pgyer.resolve_artifact(Path("app/build/outputs/apk/release"))
        
        outcome = await pgyer.run(settings.api_key, settings.password, apk)
        if outcome.is_success:
            print(f"Upload succeeded: {outcome.value}")
        else:
            print(f"Upload failed: {outcome.cause}")


async def upload_variants():
    """Upload several flavors concurrently with one client."""
    api_key = os.environ["PGY_API_KEY"]
    
    async with PgyerClient() as pgyer:
        outcomes = await asyncio.gather(*(
            pgyer.run(api_key, artifact_file=pgyer.resolve_artifact(Path(f"app/build/outputs/apk/{flavor}/release")))
            for flavor in ("free", "paid")
        ))
        for outcome in outcomes:
            print(outcome)


if __name__ == "__main__":
    asyncio.run(main())
