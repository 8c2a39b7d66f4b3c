"""
User-facing message catalogue

Keys are shared by the client, the session and the renderer. Unknown locales
and missing keys fall back to English.
"""

from typing import Optional

from worksafe.core.config import get_settings

MESSAGES = {
    "en": {
        "errors.missing-input": "Please select a photo before starting the analysis.",
        "errors.missing-credential": "The analysis service is not configured. Please contact the administrator.",
        "errors.provider-auth-failure": "The analysis service rejected its API key. Please contact the administrator.",
        "errors.provider-quota-exceeded": "The analysis quota has been exceeded. Please try again later.",
        "errors.invalid-provider-response": "The AI returned an unreadable answer. Please try again.",
        "errors.network-failure": "Network error. Please check your connection and try again.",
        "errors.generic": "Something went wrong during the analysis. Please try again.",
        "errors.invalid-format": "Please upload a valid image file (JPEG, PNG, or WebP)",
        "errors.file-too-large": "File size must be less than 10MB",
        "errors.processing-error": "Failed to process the image. Please try again.",
        "errors.analysis-in-progress": "An analysis is already running.",
        "results.title": "Safety Analysis Results",
        "results.found.one": "Found {count} potential safety risk",
        "results.found.other": "Found {count} potential safety risks",
        "results.none": "No risks detected. Everything looks safe!",
        "results.badge": "{level} Risk",
        "results.recommendation": "Recommendation",
        "levels.high": "High",
        "levels.medium": "Medium",
        "levels.low": "Low",
    },
    "tr": {
        "errors.missing-input": "Analize başlamadan önce lütfen bir fotoğraf seçin.",
        "errors.missing-credential": "Analiz servisi yapılandırılmamış. Lütfen yöneticiyle iletişime geçin.",
        "errors.provider-auth-failure": "Analiz servisi API anahtarını reddetti. Lütfen yöneticiyle iletişime geçin.",
        "errors.provider-quota-exceeded": "Analiz kotası aşıldı. Lütfen daha sonra tekrar deneyin.",
        "errors.invalid-provider-response": "Yapay zeka okunamayan bir yanıt döndürdü. Lütfen tekrar deneyin.",
        "errors.network-failure": "Ağ hatası. Lütfen bağlantınızı kontrol edip tekrar deneyin.",
        "errors.generic": "Analiz sırasında bir hata oluştu. Lütfen tekrar deneyin.",
        "errors.invalid-format": "Lütfen geçerli bir görsel dosyası yükleyin (JPEG, PNG veya WebP)",
        "errors.file-too-large": "Dosya boyutu 10MB'den küçük olmalıdır",
        "errors.processing-error": "Görsel işlenemedi. Lütfen tekrar deneyin.",
        "errors.analysis-in-progress": "Bir analiz zaten devam ediyor.",
        "results.title": "Güvenlik Analizi Sonuçları",
        "results.found.one": "{count} olası güvenlik riski bulundu",
        "results.found.other": "{count} olası güvenlik riski bulundu",
        "results.none": "Risk tespit edilmedi. Her şey güvenli görünüyor!",
        "results.badge": "{level} Risk",
        "results.recommendation": "Öneri",
        "levels.high": "Yüksek",
        "levels.medium": "Orta",
        "levels.low": "Düşük",
    },
}

FALLBACK_LOCALE = "en"


def resolve_locale(locale: Optional[str]) -> str:
    """Return a supported locale, defaulting to the configured one"""
    settings = get_settings()
    if locale and locale in settings.supported_locales and locale in MESSAGES:
        return locale
    if settings.default_locale in MESSAGES:
        return settings.default_locale
    return FALLBACK_LOCALE


def translate(key: str, locale: Optional[str] = None, **params) -> str:
    catalogue = MESSAGES[resolve_locale(locale)]
    template = catalogue.get(key) or MESSAGES[FALLBACK_LOCALE].get(key, key)
    return template.format(**params) if params else template
