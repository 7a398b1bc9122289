"""Install the legal advocate backend."""

from setuptools import setup, find_packages

setup(
    name='legal-advocate',
    version='1.0.0',
    packages=find_packages(exclude=['tests', '*test*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "werkzeug",
        "flask-sqlalchemy",
        "sqlalchemy",
        "pyjwt",
        "python-dateutil",
        "pytz",
        "redis",
        "python-json-logger",
        "wtforms",
        "email-validator",
        "flask-cors",
    ],
    extras_require={
        'test': [
            "pytest",
        ],
    },
    zip_safe=False
)
