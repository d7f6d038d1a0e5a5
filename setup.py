# Copyright 2021 Nokia

from setuptools import setup

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name='acnddl',
    version='1.0.0',
    packages=['acnddl'],
    license='Copyright 2021-2024 Nokia.',
    author='Nokia',
    author_email='',
    description='Modelling of ANSI E1.17 (ACN) Device Description Language modules',
    classifiers=[
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Libraries",
        "Topic :: Text Processing :: Markup :: XML",
        "Development Status :: 4 - Beta",
    ],
    install_requires=[
        "lxml>=4.9.2",
    ],
    extras_require={
        "test": ["pytest"],
        "docs": ["sphinx", "sphinx_rtd_theme"],
    },
    python_requires=">=3.11",
    long_description=long_description,
    long_description_content_type="text/markdown",
)
