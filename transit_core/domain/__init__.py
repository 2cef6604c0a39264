# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the transit core.

This package contains pure business logic functions with no side effects:
checksum algorithms, identifier validators, the customs duty calculator and
the payment/provision ledger. All of them are testable without external
dependencies.
"""
