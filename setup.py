from setuptools import setup, find_packages

setup(
    name="vendorgate",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "vendorgate": ["rules/*.yaml", "templates/*.html"],
    },
    install_requires=[
        "pyyaml>=6.0",
        "rich>=13.7",
        "python-dateutil>=2.9",
        "click>=8.1",
        "jinja2>=3.1",
        "google-generativeai>=0.8",
        "passlib>=1.7",
        "fastapi>=0.110",
        "python-multipart>=0.0.9",
        "pydantic>=2.5",
        "sqlmodel>=0.0.16",
        "sqlalchemy>=2.0",
        "boto3>=1.34",
        "rq>=1.16",
        "redis>=5.0"
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "vendorgate=vendorgate.cli:main",
        ],
    },
)
