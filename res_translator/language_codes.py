"""
Language code tables and Android resource folder naming.

Standards:
- ISO 639-1: 2-letter language codes (en, zh, es)
- BCP 47: Language + Region codes (en-US, zh-CN, pt-BR)

Android Resource Folder Convention:
Translated strings live in values-<suffix> folders, where the region is
written with an 'r' prefix:
- Language code 'fr' maps to folder 'values-fr'
- Language code 'zh-CN' maps to folder 'values-zh-rCN'
- Language code 'he' maps to the legacy folder 'values-iw'
The get_android_folder_suffix() function handles this mapping.
"""

from typing import Optional

# ISO 639-1 language codes (2-letter)
# Source: https://en.wikipedia.org/wiki/List_of_ISO_639-1_codes
ISO_639_1 = {
    'af': 'Afrikaans',
    'am': 'Amharic',
    'ar': 'Arabic',
    'ay': 'Aymara',
    'az': 'Azerbaijani',
    'bg': 'Bulgarian',
    'bn': 'Bengali',
    'bo': 'Tibetan',
    'bs': 'Bosnian',
    'ca': 'Catalan',
    'cs': 'Czech',
    'cy': 'Welsh',
    'da': 'Danish',
    'de': 'German',
    'el': 'Greek',
    'en': 'English',
    'es': 'Spanish',
    'et': 'Estonian',
    'eu': 'Basque',
    'fa': 'Persian',
    'ff': 'Fulah',
    'fi': 'Finnish',
    'fr': 'French',
    'ga': 'Irish',
    'gl': 'Galician',
    'gn': 'Guarani',
    'gu': 'Gujarati',
    'ha': 'Hausa',
    'he': 'Hebrew',
    'hi': 'Hindi',
    'hr': 'Croatian',
    'hu': 'Hungarian',
    'hy': 'Armenian',
    'id': 'Indonesian',
    'ig': 'Igbo',
    'is': 'Icelandic',
    'it': 'Italian',
    'ja': 'Japanese',
    'ka': 'Georgian',
    'kk': 'Kazakh',
    'km': 'Khmer',
    'kn': 'Kannada',
    'ko': 'Korean',
    'ky': 'Kyrgyz',
    'lb': 'Luxembourgish',
    'lo': 'Lao',
    'lt': 'Lithuanian',
    'lv': 'Latvian',
    'mg': 'Malagasy',
    'mi': 'Maori',
    'mk': 'Macedonian',
    'ml': 'Malayalam',
    'mn': 'Mongolian',
    'mr': 'Marathi',
    'ms': 'Malay',
    'mt': 'Maltese',
    'my': 'Burmese',
    'ne': 'Nepali',
    'nl': 'Dutch',
    'no': 'Norwegian',
    'om': 'Oromo',
    'or': 'Odia',
    'pa': 'Punjabi',
    'pl': 'Polish',
    'pt': 'Portuguese',
    'qu': 'Quechua',
    'rn': 'Kirundi',
    'ro': 'Romanian',
    'ru': 'Russian',
    'rw': 'Kinyarwanda',
    'si': 'Sinhala',
    'sk': 'Slovak',
    'sl': 'Slovenian',
    'so': 'Somali',
    'sq': 'Albanian',
    'sr': 'Serbian',
    'ss': 'Swati',
    'st': 'Southern Sotho',
    'sv': 'Swedish',
    'sw': 'Swahili',
    'ta': 'Tamil',
    'te': 'Telugu',
    'tg': 'Tajik',
    'th': 'Thai',
    'tk': 'Turkmen',
    'tn': 'Tswana',
    'tr': 'Turkish',
    'ts': 'Tsonga',
    'uk': 'Ukrainian',
    'ur': 'Urdu',
    'uz': 'Uzbek',
    've': 'Venda',
    'vi': 'Vietnamese',
    'xh': 'Xhosa',
    'yi': 'Yiddish',
    'yo': 'Yoruba',
    'zh': 'Chinese',
    'zu': 'Zulu',
}

# BCP 47 language-region codes with their own Android resource folder
BCP_47_VARIANTS = {
    'en-GB': 'English (United Kingdom)',
    'en-AU': 'English (Australia)',
    'en-IN': 'English (India)',

    'zh-CN': 'Chinese (Simplified, China)',
    'zh-TW': 'Chinese (Traditional, Taiwan)',
    'zh-HK': 'Chinese (Traditional, Hong Kong)',

    'es-ES': 'Spanish (Spain)',
    'es-US': 'Spanish (United States)',
    'es-MX': 'Spanish (Mexico)',

    'pt-BR': 'Portuguese (Brazil)',
    'pt-PT': 'Portuguese (Portugal)',

    'fr-CA': 'French (Canada)',
}

# Combined mapping
ALL_LANGUAGE_CODES = {**ISO_639_1, **BCP_47_VARIANTS}

# Android still resolves these languages through their pre-2006 ISO codes
ANDROID_LEGACY_CODES = {
    'he': 'iw',
    'id': 'in',
    'yi': 'ji',
}


def is_valid_language_code(code: str) -> bool:
    """
    Check if a language code is valid.

    Examples:
        >>> is_valid_language_code('zh-CN')
        True
        >>> is_valid_language_code('invalid')
        False
    """
    return code in ALL_LANGUAGE_CODES


def get_language_name(code: str) -> Optional[str]:
    """
    Get the full language name from code.

    Examples:
        >>> get_language_name('fr')
        'French'
        >>> get_language_name('zh-TW')
        'Chinese (Traditional, Taiwan)'
    """
    return ALL_LANGUAGE_CODES.get(code)


def extract_base_language(code: str) -> str:
    """
    Extract base language from code (remove region).

    Examples:
        >>> extract_base_language('pt-BR')
        'pt'
    """
    return code.replace('_', '-').split('-')[0]


def get_android_folder_suffix(code: str) -> str:
    """
    Get the values-<suffix> part of the Android resource folder for a language.

    Examples:
        >>> get_android_folder_suffix('de')
        'de'
        >>> get_android_folder_suffix('zh-CN')
        'zh-rCN'
        >>> get_android_folder_suffix('he')
        'iw'
    """
    parts = code.replace('_', '-').split('-')
    base = parts[0].lower()
    base = ANDROID_LEGACY_CODES.get(base, base)
    if len(parts) > 1 and parts[1]:
        return f"{base}-r{parts[1].upper()}"
    return base
