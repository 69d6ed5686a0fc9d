"""
Fixed label table for the rendered invoice. Pure lookup, no interpolation.
"""

from __future__ import annotations

from typing import Dict

DEFAULT_LANGUAGE = "en"

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "invoice": "Invoice",
        "billTo": "Bill To",
        "description": "Description",
        "qty": "Qty",
        "unitPrice": "Unit Price",
        "amount": "Amount",
        "subtotal": "Subtotal",
        "vat": "VAT",
        "total": "Total",
        "thankYou": "Thank you for your business!",
        "tin": "TIN",
        "dueDate": "Due Date",
        "poNumber": "PO Number",
        "notes": "Notes",
        "bankDetails": "Bank Details",
        "terms": "Terms & Conditions",
    },
    "am": {
        "invoice": "ደረሰኝ",
        "billTo": "ለማን፡",
        "description": "ገለፃ",
        "qty": "ብዛት",
        "unitPrice": "የአንዱ ዋጋ",
        "amount": "አጠቃላይ ዋጋ",
        "subtotal": "ንዑስ ድምር",
        "vat": "ተጨማሪ እሴት ታክስ",
        "total": "ጠቅላላ ድምር",
        "thankYou": "ስለመረጡን እናመሰግናለን!",
        "tin": "የግብር ከፋይ መለያ ቁጥር",
        "dueDate": "መክፈያ ቀን",
        "poNumber": "የግዢ ትዕዛዝ ቁጥር",
        "notes": "ማስታወሻ",
        "bankDetails": "የባንክ ሂሳብ",
        "terms": "ውሎች እና ሁኔታዎች",
    },
    "ar": {
        "invoice": "فاتورة",
        "billTo": "فاتورة إلى",
        "description": "الوصف",
        "qty": "الكمية",
        "unitPrice": "سعر الوحدة",
        "amount": "المبلغ",
        "subtotal": "المجموع الفرعي",
        "vat": "ضريبة القيمة المضافة",
        "total": "الإجمالي",
        "thankYou": "شكراً لتعاملكم معنا!",
        "tin": "الرقم الضريبي",
        "dueDate": "تاريخ الاستحقاق",
        "poNumber": "رقم طلب الشراء",
        "notes": "ملاحظات",
        "bankDetails": "تفاصيل البنك",
        "terms": "الشروط والأحكام",
    },
}

LABEL_KEYS = tuple(TRANSLATIONS[DEFAULT_LANGUAGE].keys())


def labels(language: str) -> Dict[str, str]:
    return TRANSLATIONS.get(language, TRANSLATIONS[DEFAULT_LANGUAGE])


def lookup(language: str, key: str) -> str:
    """Return the label for `key`; unknown languages use English, unknown keys raise KeyError."""
    return labels(language)[key]
