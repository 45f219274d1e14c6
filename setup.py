from setuptools import setup, find_packages

setup(
    name="minimal_client",
    version="0.1.0",
    description="AddTwoInts demonstration client with ENDPOINTS-based service name resolution",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyzmq>=24.0.0",
        "opentelemetry-api>=1.14.0",
        "opentelemetry-sdk>=1.14.0",
        "opentelemetry-exporter-otlp>=1.14.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    entry_points={
        "console_scripts": [
            "minimal-client=minimal_client.main:main",
            "minimal-server=minimal_client.server:main",
        ],
    },
    python_requires=">=3.9",
)
