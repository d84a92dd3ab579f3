from setuptools import find_packages, setup

setup(
    name="hookline",
    version="0.1.0",
    description="Priority-ordered filter hooks and async callback collection for in-process extension points",
    packages=find_packages(include=["hookline", "hookline.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
