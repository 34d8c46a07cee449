"""Install the userauth service."""

from setuptools import setup, find_packages

setup(
    name='userauth',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    install_requires=[
        "flask",
        "flask-sqlalchemy",
        "sqlalchemy",
        "pyjwt",
        "bcrypt",
        "redis",
        "fakeredis",
        "retry",
        "pytz",
        "python-json-logger",
        "click"
    ],
    extras_require={
        'mysql': ["mysqlclient"],
        'test': ["pytest"]
    },
    zip_safe=False
)
