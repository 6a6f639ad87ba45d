"""User-facing strings for the owner client (Arabic UI)."""

ACTIVATION_FAILED = "كود التفعيل غير صحيح. تأكد من تطابق الأحرف والأرقام."
COMMAND_SENT = "تم إرسال التوجيه للمساعد بنجاح ✅"
COMMAND_PREFIX = "توجيه المالك: "
UPLOAD_OK = "تم استيعاب {file_name} بنجاح ✅"
UPLOAD_FAILED = "فشل رفع الملف. تأكد من الصيغة ❌"
KNOWLEDGE_HEADER = "\n\n=== ملف جديد من المالك ({file_name}) ===\n"

HOT_LEAD_NOTIFICATION_TITLE = "🔥 عميل جاهز للشراء!"
HOT_LEAD_TITLE = "🔥 عميل صامل!"
HOT_LEAD_BODY = "العميل جاهز للشراء ويحتاج تدخلك لإتمام الصفقة الآن."
HOT_LEAD_ACCEPT = "استلام المحادثة ✅"

EXPIRED_BANNER = "انتهى اشتراك المساعد. يرجى التجديد لاستئناف العمل."
NEAR_EXPIRY_BANNER = "تنبيه: سينتهي الاشتراك خلال {days} أيام."

STATUS_STOPPED_SUBSCRIPTION = "متوقف (اشتراك)"
STATUS_RUNNING = "المساعد يعمل"
STATUS_STOPPED_MANUALLY = "متوقف يدوياً"

TONE_FRIENDLY = "ودي (خوي) 😎"
TONE_FORMAL = "رسمي جداً 👔"
TONE_SALES = "بائع محترف 🤝"

TAB_CONTROL = "التحكم والذكاء"
TAB_SETTINGS = "الإعدادات"
LOCKED_TITLE = "تفعيل المساعد الذكي"
LOCKED_PROMPT = "أهلاً بك في RAWBOT. لتشغيل مساعدك الخاص بـ \"{store_name}\"، يرجى إدخال كود التفعيل المزود لك."
