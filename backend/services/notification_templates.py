"""
WhatsApp message templates (Arabic). Each template is a plain function of its
named arguments; render() looks them up by kind.
"""
from typing import Any, Callable, Dict, List

from ..exceptions import TemplateError
from ..utils.date_utils import to_arabic_digits

SIGNATURE = "رفيق الأمل 💗"

TYPE_LABELS = {
    "consultation": "استشارة",
    "follow-up": "متابعة",
    "examination": "فحص",
    "medication-review": "مراجعة دواء",
    "risk-assessment": "تقييم مخاطر",
    "other": "أخرى",
}


def type_label(appointment_type: Any) -> str:
    """Localized label for an appointment type; unknown values pass through"""
    value = getattr(appointment_type, "value", appointment_type)
    return TYPE_LABELS.get(str(value), str(value))


def appointment_booked(patient_name: str, date: str, time: str, type_label: str) -> str:
    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"✅ تم حجز موعد جديد:\n"
        f"📅 التاريخ: {date}\n"
        f"🕐 الوقت: {time}\n"
        f"🏥 النوع: {type_label}\n\n"
        f"يرجى التأكد من حضورك في الوقت المحدد.\n\n"
        f"{SIGNATURE}"
    )


def _time_left_text(hours_until: int) -> str:
    if hours_until == 1:
        return "ساعة واحدة"
    if hours_until == 24:
        return "يوم واحد"
    if hours_until < 24:
        return f"{to_arabic_digits(hours_until)} ساعة"
    return f"{to_arabic_digits(hours_until // 24)} يوم"


def appointment_reminder(patient_name: str, date: str, time: str, hours_until: int,
                         type_label: str) -> str:
    hours_until = int(hours_until)
    if hours_until <= 1:
        urgency_emoji, urgency_text = "🚨", "قريب جداً!"
    elif hours_until <= 24:
        urgency_emoji, urgency_text = "⏰", "قريب"
    else:
        urgency_emoji, urgency_text = "📅", "قادم"

    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"{urgency_emoji} تذكير بالموعد:\n\n"
        f"📅 التاريخ: {date}\n"
        f"🕐 الوقت: {time}\n"
        f"🏥 النوع: {type_label}\n"
        f"⏱️ باقي على الموعد: {_time_left_text(hours_until)} ({urgency_text})\n\n"
        f"💡 نصائح مهمة:\n"
        f"• احضري قبل الموعد بـ 10-15 دقيقة\n"
        f"• احضري جميع التقارير والفحوصات السابقة\n"
        f"• اكتبي أي أسئلة تريدين طرحها على الطبيب\n\n"
        f"نتمنى لكِ موعداً مفيداً ومريحاً 🌸\n\n"
        f"{SIGNATURE}"
    )


def appointment_booked_doctor(doctor_name: str, patient_name: str, date: str, time: str,
                              type_label: str) -> str:
    return (
        f"دكتور/ة {doctor_name} 👨‍⚕️\n\n"
        f"📋 موعد جديد:\n"
        f"👤 المريضة: {patient_name}\n"
        f"📅 التاريخ: {date}\n"
        f"🕐 الوقت: {time}\n"
        f"🏥 النوع: {type_label}\n\n"
        f"{SIGNATURE}"
    )


def consultation_booked(patient_name: str, date: str, time: str) -> str:
    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"✅ تم حجز استشارة جديدة:\n"
        f"📅 التاريخ: {date}\n"
        f"🕐 الوقت: {time}\n\n"
        f"سيتم التواصل معك في الوقت المحدد.\n\n"
        f"{SIGNATURE}"
    )


def consultation_booked_doctor(doctor_name: str, patient_name: str, date: str, time: str) -> str:
    return (
        f"دكتور/ة {doctor_name} 👨‍⚕️\n\n"
        f"📋 استشارة جديدة:\n"
        f"👤 المريضة: {patient_name}\n"
        f"📅 التاريخ: {date}\n"
        f"🕐 الوقت: {time}\n\n"
        f"{SIGNATURE}"
    )


def medication_added(patient_name: str, med_name: str, dosage: str, times: List[str],
                     start_date: str) -> str:
    times_text = "، ".join(times) if times else "حسب التعليمات"
    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"💊 تم إضافة دواء جديد:\n"
        f"📝 الدواء: {med_name}\n"
        f"💉 الجرعة: {dosage or 'حسب التعليمات'}\n"
        f"🕐 الأوقات: {times_text}\n"
        f"📅 تاريخ البدء: {start_date}\n\n"
        f"يرجى تناول الدواء حسب الوصفة الطبية.\n"
        f"سيتم تذكيرك في الأوقات المحددة.\n\n"
        f"{SIGNATURE}"
    )


def medication_reminder(patient_name: str, med_name: str, time: str) -> str:
    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"💊 تذكير بتناول الدواء:\n"
        f"📝 الدواء: {med_name}\n"
        f"🕐 الوقت: {time}\n\n"
        f"يرجى تناول الدواء حسب الوصفة الطبية.\n\n"
        f"{SIGNATURE}"
    )


def high_risk_alert(patient_name: str) -> str:
    return (
        f"مرحباً {patient_name} 👋\n\n"
        f"⚠️ تنبيه مهم:\n\n"
        f"تم تسجيل تقييم مخاطر مرتفع في ملفك الصحي.\n"
        f"يرجى حجز موعد مع طبيبك في أقرب وقت ممكن للمتابعة.\n\n"
        f"{SIGNATURE}"
    )


def high_risk_alert_doctor(doctor_name: str, patient_name: str) -> str:
    return (
        f"دكتور/ة {doctor_name} 👨‍⚕️\n\n"
        f"⚠️ تنبيه مهم:\n\n"
        f"المريضة {patient_name} لديها تقييم مخاطر مرتفع.\n"
        f"يرجى مراجعة الملف وإجراء المتابعة اللازمة.\n\n"
        f"{SIGNATURE}"
    )


def custom(recipient_name: str, free_text: str) -> str:
    return (
        f"مرحباً {recipient_name} 👋\n\n"
        f"{free_text}\n\n"
        f"{SIGNATURE}"
    )


TEMPLATES: Dict[str, Callable[..., str]] = {
    "appointment-booked": appointment_booked,
    "appointment-reminder": appointment_reminder,
    "appointment-booked-doctor": appointment_booked_doctor,
    "consultation-booked": consultation_booked,
    "consultation-booked-doctor": consultation_booked_doctor,
    "medication-added": medication_added,
    "medication-reminder": medication_reminder,
    "high-risk-alert": high_risk_alert,
    "high-risk-alert-doctor": high_risk_alert_doctor,
    "custom": custom,
}

# Templates addressed to a doctor also name the patient they concern
DOCTOR_TEMPLATES = {
    "appointment-booked-doctor",
    "consultation-booked-doctor",
    "high-risk-alert-doctor",
}

# Argument that carries the recipient's own display name, per template
RECIPIENT_ARGUMENT = {
    kind: ("doctor_name" if kind in DOCTOR_TEMPLATES else
           "recipient_name" if kind == "custom" else "patient_name")
    for kind in TEMPLATES
}


def render(kind: str, **kwargs) -> str:
    """Render a template by kind. Raises TemplateError for unknown kinds or bad arguments."""
    template = TEMPLATES.get(kind)
    if template is None:
        raise TemplateError(f"Unknown template: {kind}")
    try:
        return template(**kwargs)
    except TypeError as e:
        raise TemplateError(f"Bad arguments for template {kind}: {e}") from e
