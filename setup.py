from setuptools import setup, find_namespace_packages


setup(
    name='keycurve',
    version='0.1',
    packages=find_namespace_packages(where="src"),
    package_dir={"": "src"},
    python_requires='>=3.11',
    install_requires=[
        'flask',
        'flask-openapi3',
        'pydantic>=2',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
