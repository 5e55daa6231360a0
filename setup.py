"""
Setup configuration for the cursor sync server.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text() if (this_directory / "README.md").exists() else ""

# Read requirements from requirements.txt
requirements_path = this_directory / "requirements.txt"
requirements = []
if requirements_path.exists():
    requirements = requirements_path.read_text().splitlines()
    # Filter out comments and empty lines
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    name="cursor-sync",
    version="1.0.0",
    description="Real-time shared cursors and exclusive object manipulation over Socket.IO",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["cursor_sync", "cursor_sync.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9,<4.0",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "pytest-cov>=4.1.0",
            "httpx>=0.25.2",
        ],
    },
    entry_points={
        "console_scripts": [
            "cursor-sync=cursor_sync.main:main",
        ],
    },
    zip_safe=False,
    keywords=[
        "realtime",
        "socketio",
        "presence",
        "collaboration",
        "cursors",
    ],
)
