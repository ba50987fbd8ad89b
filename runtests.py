#!/usr/bin/env python
"""
Test runner script for the full suite
Usage: python runtests.py [app labels...]
"""
import os
import sys
import django
from django.conf import settings
from django.test.utils import get_runner

APP_LABELS = [
    'tradebook.core',
    'tradebook.catalog',
    'tradebook.locations',
    'tradebook.parties',
    'tradebook.inventory',
    'tradebook.sales',
    'tradebook.purchasing',
    'tradebook.payments',
    'tradebook.expenses',
    'tradebook.notifications',
    'tradebook.reports',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'tradebook.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or APP_LABELS)
    sys.exit(bool(failures))
