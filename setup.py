from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="projectmap",
    version="1.0.0",
    description="Webhook receiver that publishes a cached GeoJSON feed of field-service projects",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["projectmap", "projectmap.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "projectmap=projectmap.cli:cli",
        ],
    },
)
