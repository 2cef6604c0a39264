# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
TransitGuinée core: customs duties, shipment ledger and identifier
validation for goods transiting Guinea.
"""

__version__ = "1.0.0"
