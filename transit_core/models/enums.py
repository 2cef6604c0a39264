# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the transit core.
"""

from enum import Enum


class ExpenseType(str, Enum):
    """Ledger entry kind."""
    PROVISION = "PROVISION"
    DISBURSEMENT = "DISBURSEMENT"
    FEE = "FEE"


class CustomsRegime(str, Enum):
    """Customs regime declared for a shipment."""
    IM4 = "IM4"        # definitive import
    IT = "IT"          # transit
    AT = "AT"          # temporary admission
    EXPORT = "Export"


class TaxCode(str, Enum):
    """Duties and taxes levied on imports."""
    DD = "DD"
    RTL = "RTL"
    RDL = "RDL"
    TVS = "TVS"


class ExemptionType(str, Enum):
    """Customs exemption schemes."""
    DIPLOMATIC = "DIPLOMATIC"
    HUMANITARIAN = "HUMANITARIAN"
    GOVERNMENT = "GOVERNMENT"
    MINING = "MINING"
    AGRICULTURE = "AGRICULTURE"
    HEALTH = "HEALTH"
    EDUCATION = "EDUCATION"
    CEDEAO = "CEDEAO"
    TEMPORARY = "TEMPORARY"
    TRANSIT = "TRANSIT"


class HsCategory(str, Enum):
    """ECOWAS common external tariff bands."""
    ESSENTIAL = "ESSENTIAL"          # 0%
    RAW_MATERIAL = "RAW_MATERIAL"    # 5%
    INTERMEDIATE = "INTERMEDIATE"    # 10%
    FINAL_GOODS = "FINAL_GOODS"      # 20%
    SPECIFIC = "SPECIFIC"            # 35%


class DocumentType(str, Enum):
    """Kind of document attached to a shipment file."""
    BL = "BL"
    INVOICE = "Facture"
    PACKING_LIST = "Packing List"
    CERTIFICATE = "Certificat"
    DDI = "DDI"
    BSC = "BSC"
    RECEIPT = "Quittance"
    BAE = "BAE"
    BAD = "BAD"
    TRUCK_PHOTO = "Photo Camion"
    OTHER = "Autre"


class DocumentStatus(str, Enum):
    """Review state of an attached document."""
    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"
