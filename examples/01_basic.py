"""
Basic usage - Login and list resources
"""
import asyncio
from dsbase import DsClient


async def main():
    # Token is kept in admin.storage between runs
    async with DsClient("admin", origin="https://apps.example.com",
                        user="octocat", repo="site") as ds:

        if not ds.authenticated():
            error, _ = await ds.login("octocat", "secret")
            if error:
                print(f"Login failed: {error}")
                return

        error, resources = await ds.list()
        if error:
            print(f"List failed: {error}")
            return

        print("Resources:")
        for resource in resources:
            print(f"  {resource}")


if __name__ == "__main__":
    asyncio.run(main())
