"""Install the udp2csv package from python/."""

from setuptools import setup, find_packages

setup(
    name="udp2csv",
    version="0.1.0",
    description="Capture UDP telemetry datagrams and decode them to CSV",
    package_dir={"": "python"},
    packages=find_packages("python"),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.17",
        "psutil>=5.6",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "udp2csv=udp2csv.cli:main",
        ],
    },
)
