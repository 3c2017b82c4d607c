"""Setup configuration for the League Discord Bot."""

from setuptools import setup, find_packages

setup(
    name="leaguebot",
    version="0.1.0",
    description="A Discord bot for a Brawl Stars league: verification, free agents and roster roles",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "aiosqlite>=0.20",
        "aiohttp>=3.9",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "leaguebot=leaguebot.main:main",
        ],
    },
)
