from setuptools import find_packages, setup

setup(
    name="pingdy",
    version="1.0.0",
    platforms=["any"],
    license="MIT",
    description="ICMP ping client that logs replies with RTT above a threshold",
    packages=find_packages(include=["pingdy", "pingdy.*"]),
    install_requires=[
        "click>=8.1.7",
        "colorama>=0.4.6",
        "pydantic>=2.11.4",
        "icmplib>=3.0.4",
    ],
    tests_require=[
        "pytest",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "pingdy = pingdy.main:cli",
        ],
    },
    python_requires=">=3.11",
)
