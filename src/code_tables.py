# Default code tables for EDI@Energy messages.
# Override individual tables with CodeTableManager.

MESSAGE_TYPES = {
    "UTILMD": {"name": "Stammdaten", "category": "master_data", "processes": ["GPKE", "GeLi Gas", "WiM", "MaBiS"]},
    "MSCONS": {"name": "Messwerte", "category": "metering", "processes": ["GPKE", "GeLi Gas", "MaBiS"]},
    "ORDERS": {"name": "Bestellung/Anfrage", "category": "order", "processes": ["GeLi Gas", "WiM"]},
    "ORDRSP": {"name": "Bestellantwort", "category": "order_response", "processes": ["GeLi Gas", "WiM"]},
    "INVOIC": {"name": "Rechnung", "category": "invoice", "processes": ["GPKE", "GeLi Gas", "WiM"]},
    "REMADV": {"name": "Zahlungsavise", "category": "payment", "processes": ["GPKE", "GeLi Gas", "WiM"]},
    "APERAK": {"name": "Anwendungsquittung", "category": "acknowledgement", "processes": ["GPKE", "GeLi Gas", "WiM", "MaBiS"]},
    "CONTRL": {"name": "Syntaxquittung", "category": "acknowledgement", "processes": ["GPKE", "GeLi Gas", "WiM", "MaBiS"]},
    "IFTSTA": {"name": "Statusmeldung", "category": "status", "processes": ["WiM"]},
    "INSRPT": {"name": "Störungsmeldung", "category": "incident", "processes": ["WiM"]},
    "REQOTE": {"name": "Angebotsanfrage", "category": "quotation", "processes": ["WiM"]},
    "QUOTES": {"name": "Angebot", "category": "quotation", "processes": ["WiM"]},
    "PRICAT": {"name": "Preiskatalog", "category": "pricing", "processes": ["MaBiS"]},
    "PARTIN": {"name": "Partnerinformation", "category": "partner", "processes": ["MaBiS"]},
    "COMDIS": {"name": "Datenübermittlung", "category": "data_transmission", "processes": ["MaBiS"]},
}

PRUEFIDENTIFIKATOREN = {
    "44001": "Anmeldung NN",
    "44002": "Bestätigung Anmeldung NN",
    "44003": "Ablehnung Anmeldung NN",
    "44004": "Abmeldung NN",
    "44005": "Bestätigung Abmeldung NN",
    "44006": "Ablehnung Abmeldung NN",
    "17009": "Bestellung Messwerte (WiM)",
    "19015": "Änderung Messstellenbetreiber (WiM)",
}

PARTY_ROLES = {
    "MS": "sender",
    "MR": "receiver",
    "DP": "lieferant",
    "DDQ": "netzbetreiber",
    "DDP": "messstellenbetreiber",
    "DDK": "bilanzkoordinator",
    "E01": "grundversorger",
    "E02": "ersatzversorger",
}

DATE_QUALIFIERS = {
    "137": "message_date",
    "163": "start_date",
    "164": "end_date",
    "735": "meter_reading_date",
    "392": "payment_due_date",
}

REFERENCE_QUALIFIERS = {
    "Z13": "pruefidentifikator",
    "Z14": "marktlokation_id",
    "Z15": "messlokation_id",
    "Z16": "zaehlpunkt_id",
    "Z17": "geraete_nummer",
    "Z18": "hersteller_id",
    "ADE": "vertrags_konto_nummer",
    "API": "zusaetzliche_referenz",
}
