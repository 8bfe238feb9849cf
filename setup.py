from os import path

import setuptools

path_to_repo = path.abspath(path.dirname(__file__))
with open(path.join(path_to_repo, 'readme.md'), encoding='utf-8') as f:
    long_description = f.read()

required_pypi = [
    'joblib',  # parallel scoring of candidate boundaries
    'numpy',
    'pandas',
    'scikit-learn',
    'tqdm',  # progress bars
]

setuptools.setup(
    name="caimdisc",
    version="1.0.0",
    author="caimdisc developers",
    description="Supervised CAIM discretization of continuous columns, compatible with scikit-learn",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(
        exclude=['tests', 'tests.*', '*.test.*']
    ),
    install_requires=required_pypi,
    extras_require={
        'dev': [
            'pytest',
            'pytest-cov',
        ]
    },
    python_requires='>=3.9.0',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
