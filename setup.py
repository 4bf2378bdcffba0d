from setuptools import setup, find_packages

setup(
    name="predictsafe-api",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"predictsafe.db": ["seed/*.json", "seed/users/*.json"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "aiosqlite",
        "pydantic[email]>=2.0",
        "pydantic-settings>=2.7",
        "python-dotenv",
        "python-multipart",
        "pyyaml",
        "supabase",
        "httpx",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
