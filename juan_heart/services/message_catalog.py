"""Locale-keyed patient-facing text for the referral flow.

Only English (``en``) and Filipino (``fil``) are shipped. Any other locale
falls back to English.
"""

from typing import Dict, Optional
from juan_heart.config.settings import settings
from juan_heart.models.care import CareUrgency, FacilityBadge
import logging

logger = logging.getLogger(__name__)

FALLBACK_LOCALE = "en"

_URGENCY_TEXT: Dict[str, Dict[CareUrgency, Dict[str, str]]] = {
    "en": {
        CareUrgency.NONE: {
            "title": "Assessment Result Unavailable",
            "message": "We could not interpret your assessment score. Please retake the assessment or talk to a health worker.",
            "guidance": "• Retake the heart risk assessment\n• If you feel unwell, visit your barangay health center\n• Call 911 if you have chest pain or difficulty breathing",
            "timeframe": "No immediate action required",
            "button": "View Health Tips",
        },
        CareUrgency.MONITOR: {
            "title": "Monitor Your Health",
            "message": "Some risk factors detected. Monitor your health closely and schedule a check-up within 1-2 weeks.",
            "guidance": "• Monitor your blood pressure and heart rate\n• Keep a health diary\n• Reduce salt and fat intake\n• Continue regular exercise\n• Schedule a check-up within 1-2 weeks at your local health center",
            "timeframe": "Within 1-2 weeks",
            "button": "Find Health Center",
        },
        CareUrgency.ROUTINE: {
            "title": "See a Doctor Soon",
            "message": "Your symptoms require medical attention. Please visit a doctor or clinic within 24-48 hours.",
            "guidance": "• Do not ignore your symptoms\n• Visit the nearest clinic or health center\n• Bring your assessment results\n• Avoid strenuous activities\n• Consult for a proper treatment plan",
            "timeframe": "Within 24-48 hours",
            "button": "Find Clinic",
        },
        CareUrgency.URGENT: {
            "title": "Urgent Medical Care Needed",
            "message": "You have significant risk factors. Go to a hospital or urgent care clinic within 6-24 hours.",
            "guidance": "• Go to a hospital or emergency clinic immediately\n• Bring your medications and medical records\n• Avoid any physical stress\n• Do not go alone; bring a companion\n• Call 911 or emergency hotline if symptoms worsen",
            "timeframe": "Within 6-24 hours",
            "button": "Find Hospital",
        },
        CareUrgency.EMERGENCY: {
            "title": "GO TO EMERGENCY ROOM NOW",
            "message": "CRITICAL: You need emergency care NOW. Go to the nearest emergency room or call 911 immediately.",
            "guidance": "⚠️ EMERGENCY - Do IMMEDIATELY:\n\n• Call 911 or emergency hotline\n• Go to the nearest emergency room\n• DO NOT drive yourself; have someone take you or call ambulance\n• Sit down and stay calm\n• Tell medical staff about chest pain/heart symptoms",
            "timeframe": "Immediately",
            "button": "Find Emergency Room",
        },
    },
    "fil": {
        CareUrgency.NONE: {
            "title": "Hindi Mabasa ang Resulta",
            "message": "Hindi namin mabasa ang iyong assessment score. Ulitin ang assessment o kumausap ng health worker.",
            "guidance": "• Ulitin ang heart risk assessment\n• Kung masama ang pakiramdam, pumunta sa barangay health center\n• Tawagan ang 911 kung may chest pain o hirap sa paghinga",
            "timeframe": "Walang agarang aksyon na kailangan",
            "button": "Tingnan ang Health Tips",
        },
        CareUrgency.MONITOR: {
            "title": "Bantayan ang Iyong Kalusugan",
            "message": "May ilang risk factors na nakita. Bantayan ang iyong kalusugan at magpatingin sa loob ng 1-2 linggo.",
            "guidance": "• Subaybayan ang iyong presyon at pulso\n• Gumawa ng health diary\n• Bawasan ang asin at taba sa pagkain\n• Regular na ehersisyo\n• Magpatingin sa health center sa loob ng 1-2 linggo",
            "timeframe": "Sa loob ng 1-2 linggo",
            "button": "Maghanap ng Health Center",
        },
        CareUrgency.ROUTINE: {
            "title": "Magpatingin sa Doktor Kaagad",
            "message": "May mga sintomas na nangangailangan ng atensyon. Magpatingin sa doktor o klinika sa loob ng 24-48 oras.",
            "guidance": "• Huwag balewalain ang mga sintomas\n• Magpatingin sa pinakamalapit na klinika o health center\n• Dalhin ang iyong assessment results\n• Iwasan ang mabigat na gawain\n• Kumunsulta para sa treatment plan",
            "timeframe": "Sa loob ng 24-48 oras",
            "button": "Maghanap ng Klinika",
        },
        CareUrgency.URGENT: {
            "title": "Kailangan ang Agarang Medikal na Tulong",
            "message": "Mayroon kang mataas na panganib. Pumunta sa ospital o emergency clinic sa loob ng 6-24 oras.",
            "guidance": "• Pumunta sa ospital o emergency clinic kaagad\n• Dalhin ang iyong mga gamot at medical records\n• Iwasan ang anumang physical stress\n• Huwag mag-isa; magsama ng kasama\n• Tawagan ang 911 o emergency hotline kung lumala",
            "timeframe": "Sa loob ng 6-24 oras",
            "button": "Maghanap ng Ospital",
        },
        CareUrgency.EMERGENCY: {
            "title": "PUMUNTA SA EMERGENCY ROOM NGAYON",
            "message": "KRITIKAL: Kailangan mo ng emergency care NGAYON. Pumunta sa pinakamalapit na emergency room o tawagan ang 911.",
            "guidance": "⚠️ EMERGENCY - Gawin KAAGAD:\n\n• Tawagan ang 911 o emergency hotline\n• Pumunta sa pinakamalapit na emergency room\n• HUWAG mag-drive; magpasama o tumawag ng ambulansya\n• Umupo at manatiling kalmado\n• Sabihin sa staff na may chest pain/heart symptoms",
            "timeframe": "Kaagad",
            "button": "Maghanap ng Emergency Room",
        },
    },
}

_TEXT: Dict[str, Dict[str, str]] = {
    "en": {
        "disclaimer.emergency": "⚠️ If you have severe chest pain, fainting, or difficulty breathing, go to the ER immediately or call 911.",
        "disclaimer.medical": "This app does not provide medical diagnosis. It only provides guidance based on your responses. For accurate diagnosis and treatment, please consult a licensed physician.",
        "badge.emergencyReady": "Emergency Ready",
        "badge.nearAndFast": "Near & Fast",
        "badge.communityPartner": "Community Partner",
        "share.subject": "Juan Heart Assessment Results",
        "share.intro": "Hi! I just completed my heart checkup assessment using the Juan Heart app.",
        "share.result": "Result",
        "share.going_to": "Going to",
        "share.address": "Address",
        "share.contact": "Contact",
        "share.urgent": "⚠️ I need to go {timeframe}.",
        "share.footer": "Powered by Juan Heart × Philippine Heart Center",
    },
    "fil": {
        "disclaimer.emergency": "⚠️ Kung mayroon kang matinding chest pain, pagkahilo, o hirap sa paghinga, pumunta sa ER kaagad o tawagan ang 911.",
        "disclaimer.medical": "Ang app na ito ay hindi gumagawa ng medikal na diagnosis. Ito ay gabay lamang batay sa iyong mga sagot. Para sa tumpak na diagnosis at treatment, kumunsulta sa lisensyadong doktor.",
        "badge.emergencyReady": "Emergency Ready",
        "badge.nearAndFast": "Malapit & Mabilis",
        "badge.communityPartner": "Community Partner",
        "share.subject": "Juan Heart Assessment Results",
        "share.intro": "Hi! Kakatapos ko lang ng heart checkup assessment gamit ang Juan Heart app.",
        "share.result": "Resulta",
        "share.going_to": "Pupuntahan ko",
        "share.address": "Address",
        "share.contact": "Contact",
        "share.urgent": "⚠️ Kailangan kong pumunta {timeframe}.",
        "share.footer": "Powered by Juan Heart × Philippine Heart Center",
    },
}


class MessageCatalog:
    """Lookup of translated strings keyed by locale tag."""

    def resolve_locale(self, locale: Optional[str]) -> str:
        """Normalize a locale tag ("fil-PH", "EN") to a shipped locale."""
        tag = (locale or settings.default_locale or FALLBACK_LOCALE).lower()
        tag = tag.replace("_", "-").split("-", 1)[0]
        if tag in _TEXT:
            return tag
        logger.debug(f"No catalog for locale {locale!r}, using {FALLBACK_LOCALE}")
        return FALLBACK_LOCALE

    def urgency_text(self, urgency: CareUrgency, locale: Optional[str] = None) -> Dict[str, str]:
        """Title, message, guidance, timeframe and button label for an urgency."""
        return dict(_URGENCY_TEXT[self.resolve_locale(locale)][urgency])

    def text(self, key: str, locale: Optional[str] = None) -> str:
        lang = self.resolve_locale(locale)
        try:
            return _TEXT[lang][key]
        except KeyError:
            return _TEXT[FALLBACK_LOCALE][key]

    def badge_label(self, badge: FacilityBadge, locale: Optional[str] = None) -> str:
        return self.text(f"badge.{badge.value}", locale)

    def action_button_text(self, urgency: CareUrgency, locale: Optional[str] = None) -> str:
        return self.urgency_text(urgency, locale)["button"]

    def disclaimers(self, locale: Optional[str] = None) -> Dict[str, str]:
        return {
            "emergency": self.text("disclaimer.emergency", locale),
            "medical": self.text("disclaimer.medical", locale),
        }


# Global catalog instance
_message_catalog: Optional[MessageCatalog] = None


def get_message_catalog() -> MessageCatalog:
    """Get or create MessageCatalog instance."""
    global _message_catalog
    if _message_catalog is None:
        _message_catalog = MessageCatalog()
    return _message_catalog
