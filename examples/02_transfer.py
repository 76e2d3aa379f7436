"""
Resource transfer - objects, files, removal
"""
import asyncio
from pathlib import Path
from dsbase import DsClient, DsAPIError


async def main():
    async with DsClient("admin") as ds:
        ds.set_base("https://apps.example.com")
        ds.set_repo("octocat", "site")

        # Objects travel as JSON files
        await ds.upload_object({"title": "Home", "blocks": []}, "page.json")
        error, page = await ds.download_object("page.json")
        if error == 415:
            print("page.json is not valid JSON")
        else:
            print(f"Downloaded: {page}")

        # Opaque files: bytes, paths or open binary files
        await ds.upload_file(Path("logo.png"))
        await ds.upload_file(b"\x00\x01", filename="raw.bin")

        # Exceptions instead of error codes
        try:
            (await ds.remove("raw.bin")).raise_for_error()
        except DsAPIError as e:
            print(f"Delete failed: {e.code} {e.message}")


if __name__ == "__main__":
    asyncio.run(main())
