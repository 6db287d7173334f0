# scripts/__init__.py
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional


class ScriptUtils:
    @staticmethod
    def get_project_root() -> Path:
        """Get the absolute path to the project root directory."""
        return Path(__file__).parent.parent.absolute()

    @staticmethod
    def setup_project_path() -> None:
        """Add project root to Python path so `portal` and `config` import."""
        root_dir = str(ScriptUtils.get_project_root())
        if root_dir not in sys.path:
            sys.path.append(root_dir)

    @staticmethod
    def load_env_file() -> dict:
        """Load KEY=value pairs from the project's .env file, if it exists."""
        env_path = ScriptUtils.get_project_root() / '.env'
        env_vars = {}

        if env_path.exists():
            with open(env_path, encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#') or '=' not in line:
                        continue
                    key, value = line.split('=', 1)
                    env_vars[key.strip()] = value.strip().strip('"').strip("'")

        return env_vars

    @staticmethod
    def update_env_file(key: str, value: str) -> bool:
        """
        Update or add a key-value pair to the .env file.

        Args:
            key: The environment variable name
            value: The value to set

        Returns:
            bool: True if file was updated, False if user declined
        """
        env_path = ScriptUtils.get_project_root() / '.env'

        if not env_path.exists():
            confirm = input(".env file not found. Create it? (y/N): ")
            if confirm.lower() != 'y':
                return False
            env_path.write_text(f"{key}={value}\n", encoding='utf-8')
            print(f"Created .env file with {key}")
            return True

        env_vars = ScriptUtils.load_env_file()

        if key in env_vars:
            confirm = input(f"{key} already exists in .env. Replace it? (y/N): ")
            if confirm.lower() != 'y':
                return False

        env_vars[key] = value

        with open(env_path, 'w', encoding='utf-8') as f:
            for k, v in env_vars.items():
                f.write(f"{k}={v}\n")

        print(f"Updated {key} in .env file")
        return True

    @staticmethod
    def get_env_value(key: str, prompt: Optional[str] = None) -> Optional[str]:
        """
        Get an environment variable value, optionally prompting user if not found.

        Args:
            key: The environment variable name
            prompt: Optional prompt to show user if value not found

        Returns:
            Optional[str]: The value if found or provided by user, None otherwise
        """
        value = os.environ.get(key)

        if not value and prompt:
            value = input(prompt)

        return value

    @staticmethod
    @contextmanager
    def app_context():
        """Build the portal app from the environment and push its context."""
        ScriptUtils.setup_project_path()
        from portal import create_app

        app = create_app()
        with app.app_context():
            yield app
