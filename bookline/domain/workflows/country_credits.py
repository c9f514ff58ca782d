"""Credits charged per SMS, by ISO 3166-1 alpha-2 destination country"""

DEFAULT_CREDITS_PER_SMS = 3

SMS_COUNTRY_CREDITS: dict[str, int] = {
    "US": 1,
    "CA": 1,
    "PR": 1,
    "GB": 3,
    "IE": 5,
    "DE": 7,
    "AT": 8,
    "CH": 5,
    "FR": 6,
    "ES": 6,
    "PT": 3,
    "IT": 6,
    "NL": 9,
    "BE": 7,
    "LU": 4,
    "DK": 4,
    "SE": 5,
    "NO": 5,
    "FI": 7,
    "PL": 3,
    "CZ": 4,
    "GR": 5,
    "RO": 5,
    "HU": 8,
    "IL": 9,
    "TR": 2,
    "AE": 3,
    "SA": 3,
    "IN": 1,
    "PK": 5,
    "BD": 6,
    "CN": 3,
    "JP": 6,
    "KR": 2,
    "SG": 4,
    "MY": 7,
    "TH": 2,
    "ID": 6,
    "PH": 2,
    "VN": 6,
    "AU": 4,
    "NZ": 8,
    "ZA": 2,
    "NG": 3,
    "KE": 2,
    "EG": 6,
    "MA": 6,
    "BR": 2,
    "MX": 2,
    "AR": 5,
    "CL": 3,
    "CO": 1,
    "PE": 4,
}
