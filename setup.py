import io
import re

from setuptools import find_packages, setup

__version__ = re.search(
    r'__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
    io.open("kubesim/version.py", encoding="utf_8_sig").read(),
).group(1)


setup(
    name="kubesim",
    version=__version__,
    description="kubesim is a discrete-time simulator of a cluster scheduler.",
    long_description="""kubesim simulates a cluster scheduler: nodes with finite capacity, pluggable workload
submitters, and a filter-then-score pipeline placing one workload per tick.""",
    author="",
    author_email="",
    packages=find_packages(include=["kubesim", "kubesim.*"]),
    zip_safe=False,
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "pydantic>=2",
        "fire",
        "typing_extensions",
    ],
    extras_require={
        "tests": ["pytest"],
    },
)
