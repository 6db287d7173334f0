# scripts/generate_admin_secret.py
import secrets

from scripts import ScriptUtils


def main():
    """Generate a new signing secret for admin session tokens."""
    ScriptUtils.setup_project_path()

    key = secrets.token_urlsafe(48)

    print("\nGenerated admin token secret:")
    print(f"ADMIN_TOKEN_SECRET={key}")

    print("\nIMPORTANT:")
    print("1. Changing this secret signs out every admin session")
    print("2. Add this key to your environment variables:")
    print("   - For development: Add to your .env file")
    print("   - For production: Add to your server environment")

    ScriptUtils.update_env_file('ADMIN_TOKEN_SECRET', key)


if __name__ == "__main__":
    main()
