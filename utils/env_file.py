"""
.env maintenance
Records deployed addresses next to the rest of the configuration
"""

import os
from loguru import logger


def update_env_file(key: str, value: str, env_path: str = ".env") -> bool:
    """
    Set KEY=value in a .env file, replacing an existing line or appending

    Args:
        key: Variable name
        value: New value
        env_path: Path to .env file

    Returns:
        True if the file was written
    """
    try:
        lines = []
        if os.path.exists(env_path):
            with open(env_path, 'r') as f:
                lines = f.readlines()

        found = False
        for i, line in enumerate(lines):
            if line.startswith(f'{key}='):
                lines[i] = f'{key}={value}\n'
                found = True
                break

        if not found:
            if lines and not lines[-1].endswith('\n'):
                lines[-1] += '\n'
            lines.append(f'{key}={value}\n')

        with open(env_path, 'w') as f:
            f.writelines(lines)

        logger.success(f"Updated {env_path} with {key}")
        return True

    except OSError as e:
        logger.error(f"Error updating {env_path}: {e}")
        return False
