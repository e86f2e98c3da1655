import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name='sklearn_reducts',
    version='0.0',
    packages=setuptools.find_packages(),
    license='BSD',
    description='Rough set reducts (minimal discerning feature subsets) '
                'for scikit-learn.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.10',
    install_requires=[
        'scikit_learn >= 1.6',
        'numpy',
    ],
    extras_require={
        'tests': ['matplotlib', 'pytest >= 3.5', 'scipy'],
    },
)
