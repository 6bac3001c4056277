import re
from setuptools import setup


def get_metadata(name):
    """Read a dunder attribute from the package without importing it"""
    with open("skqpad/__init__.py") as f:
        init = f.read()

    return(re.search(r'^__{}__ = "([^"]+)"'.format(name), init,
                     re.MULTILINE).group(1))


def readme():
    with open('README.rst') as f:
        lines = f.readlines()

    return("".join(lines))


def get_requirements():
    with open("requirements.txt") as f:
        reqs = f.read().splitlines()

    return(reqs)


REQUIREMENTS = get_requirements()
DEV_REQUIRES = ["ipython", "flake8"]
PACKAGES = ["skqpad", "skqpad.likelihood", "skqpad.tests"]

setup(
    name="scikit-QPAD",
    version=get_metadata("version"),
    python_requires=">=3.9",
    packages=PACKAGES,
    include_package_data=True,
    # Below is redundant but safe
    package_data={
        'skqpad': ["config_examples/*.json"]},
    install_requires=REQUIREMENTS,
    extras_require={
        "dev": DEV_REQUIRES,
        "docs": ["sphinx"],
        "test": ["pytest"]
    },
    # metadata for upload to PyPI
    author="Sebastian Luque",
    author_email="spluque@gmail.com",
    description=("Conditional multinomial models of availability and "
                 "perceptibility for point-count surveys"),
    long_description=readme(),
    long_description_content_type="text/x-rst",
    license=get_metadata("license"),
    keywords=["point counts", "removal sampling", "distance sampling",
              "detectability", "birds", "QPAD"],
    classifiers=["Development Status :: 4 - Beta",
                 "Programming Language :: Python :: 3",
                 "Intended Audience :: Developers",
                 "Intended Audience :: Science/Research",
                 ("License :: OSI Approved :: "
                  "GNU Affero General Public License v3"),
                 "Topic :: Scientific/Engineering"]
)
