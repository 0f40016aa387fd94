"""
Constantes globales pour memberflow.

Ce module contient :
- Les sections et catégories du formulaire dynamique
- Les valeurs initiales du catalogue des listes déroulantes
- Les définitions initiales des champs du formulaire
- La table des continents (codes ISO alpha-2) pour la carte des membres
"""

# Sections du formulaire dynamique
SECTION_ORGANISATION = "organizationInformation"
SECTION_ADDRESS = "organizationAddress"
SECTION_SOCIAL = "socialMedia"
SECTION_CONSENT = "consent"

PROFILE_SECTIONS = (SECTION_ORGANISATION, SECTION_ADDRESS, SECTION_SOCIAL)
CREATE_SECTIONS = (SECTION_ORGANISATION, SECTION_ADDRESS, SECTION_SOCIAL, SECTION_CONSENT)

# Catégories du catalogue
CATEGORY_ORGANIZATION_TYPE = "organizationType"
CATEGORY_INDUSTRIES = "industries"
CATEGORY_COUNTRY = "country"

MEMBERSHIP_TYPES = (
    "votingMember",
    "associateMember",
    "strategicMembers",
    "partnerAndObserver",
)

# Valeurs initiales : (catégorie, code, libellé)
DROPDOWN_SEED = (
    (CATEGORY_ORGANIZATION_TYPE, "freeZoneAuthority", "Free Zone Authority"),
    (CATEGORY_ORGANIZATION_TYPE, "freeZoneOperator", "Free Zone Operator / Developer"),
    (CATEGORY_ORGANIZATION_TYPE, "governmentEntity", "Government Entity"),
    (CATEGORY_ORGANIZATION_TYPE, "privateCompany", "Private Company"),
    (CATEGORY_ORGANIZATION_TYPE, "association", "Association"),
    (CATEGORY_ORGANIZATION_TYPE, "academicInstitution", "Academic Institution"),
    (CATEGORY_INDUSTRIES, "manufacturing", "Manufacturing"),
    (CATEGORY_INDUSTRIES, "technology", "Technology & IT Services"),
    (CATEGORY_INDUSTRIES, "financialServices", "Financial Services"),
    (CATEGORY_INDUSTRIES, "healthcare", "Healthcare & Pharmaceuticals"),
    (CATEGORY_INDUSTRIES, "retail", "Retail & E-commerce"),
    (CATEGORY_INDUSTRIES, "logistics", "Logistics & Supply Chain"),
    (CATEGORY_INDUSTRIES, "realEstate", "Real Estate & Construction"),
    (CATEGORY_INDUSTRIES, "energy", "Energy & Utilities"),
    (CATEGORY_INDUSTRIES, "telecommunications", "Telecommunications"),
    (CATEGORY_INDUSTRIES, "media", "Media & Entertainment"),
    (CATEGORY_INDUSTRIES, "education", "Education & Training"),
    (CATEGORY_INDUSTRIES, "hospitality", "Hospitality & Tourism"),
    (CATEGORY_INDUSTRIES, "agriculture", "Agriculture & Food Production"),
    (CATEGORY_INDUSTRIES, "transportation", "Transportation & Aviation"),
    (CATEGORY_INDUSTRIES, "consulting", "Consulting & Professional Services"),
    (CATEGORY_INDUSTRIES, "automotive", "Automotive"),
    (CATEGORY_INDUSTRIES, "chemicals", "Chemicals & Materials"),
    (CATEGORY_INDUSTRIES, "environmental", "Environmental Services"),
    (CATEGORY_INDUSTRIES, "maritime", "Maritime & Shipping"),
    (CATEGORY_INDUSTRIES, "aerospace", "Aerospace & Defense"),
    (CATEGORY_INDUSTRIES, "other", "Other"),
)

# Définitions initiales : (clé, type brut, section, catégorie, multiple, obligatoire, libellé)
FORM_FIELD_SEED = (
    ("companyName", "text", SECTION_ORGANISATION, None, False, True,
     "Full legal name of the organization"),
    ("typeOfTheOrganization", "dropdown", SECTION_ORGANISATION, CATEGORY_ORGANIZATION_TYPE,
     False, True, "Type of the organization"),
    ("industries", "dropdown", SECTION_ORGANISATION, CATEGORY_INDUSTRIES, True, True,
     "Industries"),
    ("websiteUrl", "url", SECTION_ORGANISATION, None, False, True, "Website"),
    ("organizationContactNumber", "phone", SECTION_ORGANISATION, None, False, True,
     "Organization contact number"),
    ("licenseDocumentUpload", "button", SECTION_ORGANISATION, None, False, True,
     "License document"),
    ("logoDocumentUpload", "button", SECTION_ORGANISATION, None, False, True, "Logo"),
    ("addressLine1", "text", SECTION_ADDRESS, None, False, True, "Address line 1"),
    ("addressLine2", "text", SECTION_ADDRESS, None, False, False, "Address line 2"),
    ("addressCity", "text", SECTION_ADDRESS, None, False, True, "City"),
    ("addressState", "text", SECTION_ADDRESS, None, False, False, "State"),
    ("addressCountry", "dropdown", SECTION_ADDRESS, CATEGORY_COUNTRY, False, True, "Country"),
    ("addressZip", "text", SECTION_ADDRESS, None, False, False, "Zip code"),
    ("linkedInUrl", "url", SECTION_SOCIAL, None, False, False, "LinkedIn"),
    ("twitterUrl", "url", SECTION_SOCIAL, None, False, False, "X / Twitter"),
    ("facebookUrl", "url", SECTION_SOCIAL, None, False, False, "Facebook"),
    ("instagramUrl", "url", SECTION_SOCIAL, None, False, False, "Instagram"),
    ("youtubeUrl", "url", SECTION_SOCIAL, None, False, False, "YouTube"),
    ("articleOfAssociationConsent", "checkbox", SECTION_CONSENT, None, False, True,
     "I accept the articles of association"),
    ("articleOfAssociationCriteriaConsent", "checkbox", SECTION_CONSENT, None, False, True,
     "I meet the membership criteria of the articles of association"),
    ("authorizedPersonDeclaration", "checkbox", SECTION_CONSENT, None, False, True,
     "I am authorized to apply on behalf of the organization"),
)

# Continents -> codes ISO alpha-2
CONTINENT_COUNTRIES = {
    "Africa": (
        "DZ AO BJ BW BF BI CM CV CF TD KM CG CD CI DJ EG GQ ER ET GA GM GH GN GW KE LS "
        "LR LY MG MW ML MR MU YT MA MZ NA NE NG RE RW SH ST SN SC SL SO ZA SS SD SZ TZ "
        "TG TN UG EH ZM ZW"
    ),
    "Asia": (
        "AF AM AZ BH BD BT BN KH CN CY GE HK IN ID IR IQ IL JP JO KZ KW KG LA LB MO MY "
        "MV MN MM NP KP OM PK PS PH QA SA SG KR LK SY TW TJ TH TL TR TM AE UZ VN YE"
    ),
    "Europe": (
        "AX AL AD AT BY BE BA BG HR CZ DK EE FO FI FR DE GI GR GG HU IS IE IM IT JE XK "
        "LV LI LT LU MK MT MD MC ME NL NO PL PT RO RU SM RS SK SI ES SJ SE CH UA GB VA"
    ),
    "North America": (
        "AI AG AW BS BB BZ BM BQ VG CA KY CR CU CW DM DO SV GL GD GP GT HT HN JM MQ MX "
        "MS NI PA PR BL KN LC MF PM VC SX TT TC US VI"
    ),
    "Oceania": "AS AU CK FJ PF GU KI MH FM NR NC NZ NU NF MP PW PG PN WS SB TK TO TV VU WF",
    "South America": "AR BO BR CL CO EC FK GF GY PY PE SR UY VE",
}

ALPHA2_TO_CONTINENT = {
    code: continent
    for continent, codes in CONTINENT_COUNTRIES.items()
    for code in codes.split()
}

UNKNOWN_CONTINENT = "Other"

# Variantes de noms de pays rencontrées dans les saisies
COUNTRY_ALIASES = {
    "usa": "US",
    "us": "US",
    "united states of america": "US",
    "uk": "GB",
    "uae": "AE",
    "korea": "KR",
    "south korea": "KR",
    "dr congo": "CD",
    "drc": "CD",
    "congo (kinshasa)": "CD",
    "democratic republic of the congo": "CD",
    "democratic republic of the congo (kinshasa)": "CD",
    "russia": "RU",
    "iran": "IR",
    "vietnam": "VN",
    "taiwan": "TW",
    "palestine": "PS",
    "kosovo": "XK",
}
