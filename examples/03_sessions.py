"""
Session management - callbacks, token login, admin hook, logout
"""
import asyncio
from dsbase import DsClient, MemoryTokenStore


async def main():
    # In-memory token, nothing written to disk
    ds = DsClient(MemoryTokenStore(), origin="https://apps.example.com",
                  user="octocat", repo="site")

    ds.on("reset", lambda: print("Session reset"))

    # Callback style: invoked exactly once when the call completes
    await ds.login_token("token-from-elsewhere",
                         callback=lambda error: print(f"login_token -> {error}"))

    # Admin hook: prompts only when no token is stored
    def ask(frame):
        return input("Username: "), input("Password: ")

    await ds.add_admin_tools(frame="admin-panel", login_callback=lambda: print("Ready"),
                             credentials=ask)

    error, versions = await ds.get_server_versions()
    print(versions)

    ds.logout()
    await ds.close()


if __name__ == "__main__":
    asyncio.run(main())
