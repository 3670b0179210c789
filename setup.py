from setuptools import setup, find_packages
import re

# Read version from fieldpay/__init__.py
with open('fieldpay/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='field-pay',
    version=version,
    packages=find_packages(include=['fieldpay', 'fieldpay.*']),
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'field-pay=fieldpay.cli.__main__:main',
            'field-pay-mcp=fieldpay.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='GST breakdowns, pay-period schedules and trial analytics for Alberta field contractors.',
    python_requires='>=3.10',
)
