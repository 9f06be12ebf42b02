"""演示数据 - 管理コンソール启动时载入的种子数据。

数据全部保存在内存数据库中，进程退出即丢失。
匹配分配的完成数由随机数生成，随机数种子取自 settings.seed_random_seed，
因此同一种子每次生成的数据完全相同。
"""
import random
from typing import Optional, Dict, List, Any, TYPE_CHECKING
from datetime import date, datetime, timedelta
from loguru import logger

from .models import PartnerUrl, LegalDocumentVersion
from .business_repos import FUNNEL_FIELDS
from config.settings import settings

if TYPE_CHECKING:
    from .manager import DatabaseManager

# 演示数据的基准日期（分配完成日期取该月 1〜5 日）
SEED_REFERENCE_DATE = date(2025, 9, 22)


PARTNERS: List[Dict[str, Any]] = [
    {"id": "PART001", "name": "パートナーA", "contact_email": "contact@partner-a.example.com",
     "lp_url": "https://fp-match.example.com/lp/partner-a", "status": "アクティブ",
     "last_updated": date(2024, 9, 15),
     "urls": [("https://fp-match.example.com/lp/partner-a?ref=PART001&v=1", date(2024, 3, 1), "停止済み", 38),
              ("https://fp-match.example.com/lp/partner-a?ref=PART001&v=2", date(2024, 7, 1), "利用中", 52)]},
    {"id": "PART002", "name": "パートナーB", "contact_email": "info@partner-b.example.com",
     "lp_url": "https://fp-match.example.com/lp/partner-b", "status": "アクティブ",
     "last_updated": date(2024, 9, 10),
     "urls": [("https://fp-match.example.com/lp/partner-b?ref=PART002&v=1", date(2024, 5, 12), "利用中", 27)]},
    {"id": "PART003", "name": "パートナーC", "contact_email": "sales@partner-c.example.com",
     "lp_url": "https://fp-match.example.com/lp/partner-c", "status": "アクティブ",
     "last_updated": date(2024, 8, 28),
     "urls": [("https://fp-match.example.com/lp/partner-c?ref=PART003&v=1", date(2024, 6, 3), "利用中", 19)]},
    {"id": "PART004", "name": "パートナーD", "contact_email": "hello@partner-d.example.com",
     "lp_url": "https://fp-match.example.com/lp/partner-d", "status": "アクティブ",
     "last_updated": date(2024, 8, 2),
     "urls": [("https://fp-match.example.com/lp/partner-d?ref=PART004&v=1", date(2024, 7, 20), "利用中", 8)]},
    {"id": "PART005", "name": "パートナーE", "contact_email": "support@partner-e.example.com",
     "lp_url": "https://fp-match.example.com/lp/partner-e", "status": "停止中",
     "last_updated": date(2024, 6, 30),
     "urls": [("https://fp-match.example.com/lp/partner-e?ref=PART005&v=1", date(2024, 2, 14), "停止済み", 11)]},
]

FPS: List[Dict[str, Any]] = [
    {"id": "FP001", "name": "田中太郎", "furigana": "タナカタロウ", "email": "tanaka@fp-office.example.com",
     "fp_type": "個人", "company": "", "join_date": date(2023, 4, 1), "rank": 4,
     "assigned_count": 8, "monthly_limit": 10, "work_address": "東京都千代田区"},
    {"id": "FP002", "name": "山田花子", "furigana": "ヤマダハナコ", "email": "yamada@yamada-corp.example.com",
     "fp_type": "法人", "company": "山田株式会社", "position": "代表取締役", "role": "管理者",
     "join_date": date(2023, 6, 15), "rank": 5, "assigned_count": 15, "monthly_limit": 15,
     "work_address": "大阪府大阪市"},
    {"id": "FP003", "name": "高橋一郎", "furigana": "タカハシイチロウ", "email": "takahashi@fp-office.example.com",
     "fp_type": "個人", "company": "", "join_date": date(2023, 9, 1), "rank": 3,
     "assigned_count": 3, "monthly_limit": 8, "work_address": "神奈川県横浜市"},
    {"id": "FP004", "name": "伊藤沙織", "furigana": "イトウサオリ", "email": "ito@ito-consulting.example.com",
     "fp_type": "法人", "company": "伊藤コンサルティング", "position": "FP", "join_date": date(2023, 11, 20),
     "rank": 4, "assigned_count": 6, "monthly_limit": 12, "work_address": "愛知県名古屋市"},
    {"id": "FP005", "name": "渡辺大輔", "furigana": "ワタナベダイスケ", "email": "watanabe@fp-office.example.com",
     "fp_type": "個人", "company": "", "join_date": date(2024, 1, 10), "rank": 3,
     "assigned_count": 10, "monthly_limit": 10, "work_address": "福岡県福岡市"},
    {"id": "FP006", "name": "松本翔太", "furigana": "マツモトショウタ", "email": "matsumoto@fp-office.example.com",
     "fp_type": "個人", "company": "", "join_date": date(2024, 2, 5), "rank": 2,
     "assigned_count": 2, "monthly_limit": 6, "work_address": "北海道札幌市"},
    {"id": "FP007", "name": "安藤裕子", "furigana": "アンドウユウコ", "email": "ando@ando-group.example.com",
     "fp_type": "法人", "company": "安藤グループ", "position": "部長", "role": "管理者",
     "join_date": date(2024, 3, 18), "rank": 5, "assigned_count": 12, "monthly_limit": 20,
     "work_address": "東京都港区"},
    {"id": "FP008", "name": "佐々木恵", "furigana": "ササキメグミ", "email": "sasaki@fp-office.example.com",
     "fp_type": "個人", "company": "", "join_date": date(2024, 4, 22), "rank": 3,
     "assigned_count": 0, "monthly_limit": 5, "status": "停止中", "work_address": "宮城県仙台市"},
    {"id": "FP009", "name": "小林由美", "furigana": "コバヤシユミ", "email": "kobayashi@kimura-finance.example.com",
     "fp_type": "法人", "company": "木村ファイナンス", "position": "FP", "join_date": date(2024, 6, 1),
     "rank": 3, "assigned_count": 4, "monthly_limit": 10, "work_address": "京都府京都市"},
    {"id": "FP010", "name": "石井美穂", "furigana": "イシイミホ", "email": "ishii@ishikawa-fp.example.com",
     "fp_type": "法人", "company": "石川ファイナンシャル", "position": "FP", "join_date": date(2024, 7, 8),
     "rank": 4, "assigned_count": 9, "monthly_limit": 10, "work_address": "兵庫県神戸市"},
]

USERS: List[Dict[str, Any]] = [
    {"id": "U001", "name": "佐藤花子", "furigana": "サトウハナコ", "email": "hanako.sato@example.com",
     "phone": "090-1234-5678", "birth_date": date(1989, 5, 12), "gender": "女性", "prefecture": "東京都",
     "consultation_content": "生命保険の見直し", "preferred_call_time": "平日 18:00-20:00",
     "line_status": "連携済み", "partner_id": "PART001", "registration_date": date(2024, 9, 15),
     "verification_status": "認証済み", "is_new": False, "last_login": datetime(2024, 9, 20, 21, 5)},
    {"id": "U002", "name": "鈴木一郎", "furigana": "スズキイチロウ", "email": "ichiro.suzuki@example.com",
     "phone": "080-2345-6789", "birth_date": date(1978, 11, 3), "gender": "男性", "prefecture": "大阪府",
     "consultation_content": "老後資金の準備", "preferred_call_time": "土日 午前",
     "line_status": "連携済み", "partner_id": "PART002", "registration_date": date(2024, 9, 14),
     "verification_status": "認証済み", "is_new": False, "last_login": datetime(2024, 9, 18, 9, 30)},
    {"id": "U003", "name": "田村恵子", "furigana": "タムラケイコ", "email": "keiko.tamura@example.com",
     "phone": "070-3456-7890", "birth_date": date(1992, 2, 28), "gender": "女性", "prefecture": "神奈川県",
     "consultation_content": "住宅ローンの相談", "preferred_call_time": "平日 昼",
     "line_status": "未連携", "partner_id": "PART003", "registration_date": date(2024, 9, 12),
     "verification_status": "認証済み", "is_new": False},
    {"id": "U004", "name": "中村健太", "furigana": "ナカムラケンタ", "email": "kenta.nakamura@example.com",
     "phone": "090-4567-8901", "birth_date": date(1985, 7, 19), "gender": "男性", "prefecture": "愛知県",
     "consultation_content": "NISA/iDeCo の始め方", "preferred_call_time": "平日 19:00以降",
     "line_status": "連携済み", "partner_id": "PART001", "registration_date": date(2024, 9, 11),
     "verification_status": "未認証", "is_new": True},
    {"id": "U005", "name": "小林さくら", "furigana": "コバヤシサクラ", "email": "sakura.kobayashi@example.com",
     "phone": "080-5678-9012", "birth_date": date(1995, 4, 1), "gender": "女性", "prefecture": "福岡県",
     "consultation_content": "家計の見直し", "preferred_call_time": "いつでも可",
     "line_status": "未連携", "partner_id": "PART004", "registration_date": date(2024, 9, 10),
     "verification_status": "未認証", "is_new": True},
    {"id": "U006", "name": "森田拓海", "furigana": "モリタタクミ", "email": "takumi.morita@example.com",
     "phone": "070-6789-0123", "birth_date": date(1990, 9, 9), "gender": "男性", "prefecture": "北海道",
     "consultation_content": "教育資金", "preferred_call_time": "土日 午後",
     "line_status": "連携済み", "partner_id": "PART002", "registration_date": date(2024, 9, 8),
     "verification_status": "認証済み", "is_new": False},
    {"id": "U007", "name": "清水美香", "furigana": "シミズミカ", "email": "mika.shimizu@example.com",
     "phone": "090-7890-1234", "birth_date": date(1983, 12, 24), "gender": "女性", "prefecture": "東京都",
     "consultation_content": "資産運用", "preferred_call_time": "平日 午前",
     "line_status": "連携済み", "partner_id": "PART005", "registration_date": date(2024, 9, 5),
     "verification_status": "認証済み", "is_new": False},
    {"id": "U008", "name": "岡田直樹", "furigana": "オカダナオキ", "email": "naoki.okada@example.com",
     "phone": "080-8901-2345", "birth_date": date(1975, 3, 30), "gender": "男性", "prefecture": "宮城県",
     "consultation_content": "相続対策", "preferred_call_time": "平日 夕方",
     "line_status": "未連携", "partner_id": "PART001", "registration_date": date(2024, 9, 3),
     "verification_status": "未認証", "is_new": True},
    {"id": "U009", "name": "井上千春", "furigana": "イノウエチハル", "email": "chiharu.inoue@example.com",
     "phone": "070-9012-3456", "birth_date": date(1998, 6, 15), "gender": "女性", "prefecture": "京都府",
     "consultation_content": "医療保険の加入", "preferred_call_time": "土日 終日",
     "line_status": "連携済み", "partner_id": None, "registration_date": date(2024, 8, 30),
     "verification_status": "認証済み", "is_new": False},
    {"id": "U010", "name": "坂本真理", "furigana": "サカモトマリ", "email": "mari.sakamoto@example.com",
     "phone": "090-0123-4567", "birth_date": date(1987, 10, 21), "gender": "女性", "prefecture": "兵庫県",
     "consultation_content": "ライフプラン全般", "preferred_call_time": "平日 20:00以降",
     "line_status": "未連携", "partner_id": "PART003", "registration_date": date(2024, 8, 25),
     "verification_status": "認証済み", "is_new": False},
    {"id": "U011", "name": "青木翔", "furigana": "アオキショウ", "email": "sho.aoki@example.com",
     "phone": "080-1111-2222", "birth_date": date(1993, 1, 8), "gender": "男性", "prefecture": "埼玉県",
     "consultation_content": "保険の見直し", "preferred_call_time": "平日 昼",
     "line_status": "未連携", "partner_id": "PART002", "registration_date": date(2024, 8, 20),
     "verification_status": "未認証", "is_new": True},
    {"id": "U012", "name": "青木玲奈", "furigana": "アオキレイナ", "email": "reina.aoki@example.com",
     "phone": "070-3333-4444", "birth_date": date(1996, 8, 17), "gender": "女性", "prefecture": "千葉県",
     "consultation_content": "資産形成", "preferred_call_time": "土日 午前",
     "line_status": "連携済み", "partner_id": "PART004", "registration_date": date(2024, 9, 16),
     "verification_status": "認証済み", "is_new": True},
]

# (ID, 分配时间, FP, 用户, 合作伙伴, 分配类型, 分配方式, 当前状态)
MATCHING_HISTORY = [
    ("HIST001", datetime(2024, 9, 15, 14, 30), "FP001", "U001", "PART001", "基本割当", "自動マッチング", "面談実施"),
    ("HIST002", datetime(2024, 9, 15, 9, 45), "FP002", "U002", "PART002", "追加配信依頼", "手動割当", "日程調整"),
    ("HIST003", datetime(2024, 9, 14, 16, 20), "FP003", "U003", "PART003", "基本割当", "自動マッチング", "契約"),
    ("HIST004", datetime(2024, 9, 14, 11, 15), "FP004", "U004", "PART001", "基本割当", "自動マッチング", "商品提案"),
    ("HIST005", datetime(2024, 9, 13, 13, 50), "FP005", "U005", "PART004", "追加配信依頼", "自動マッチング", "新規"),
    ("HIST006", datetime(2024, 9, 13, 10, 25), "FP006", "U006", "PART002", "基本割当", "手動割当", "失注"),
    ("HIST007", datetime(2024, 9, 12, 15, 40), "FP007", "U007", "PART005", "基本割当", "自動マッチング", "面談実施"),
    ("HIST008", datetime(2024, 9, 12, 8, 30), "FP008", "U008", "PART001", "追加配信依頼", "手動割当", "保留"),
    ("HIST009", datetime(2024, 9, 11, 17, 10), "FP009", "U009", None, "基本割当", "自動マッチング", "日程調整"),
    ("HIST010", datetime(2024, 9, 11, 12, 5), "FP010", "U010", "PART003", "基本割当", "自動マッチング", "契約"),
]

REVIEWS: List[Dict[str, Any]] = [
    {"id": "REV001", "posted_at": datetime(2024, 9, 18, 20, 15), "reviewer_name": "佐藤花子",
     "reviewer_type": "エンドユーザー", "fp_id": "FP001", "user_id": "U001", "rating": 5,
     "review_content": "保険の見直しについて丁寧に説明していただきました。",
     "status_at_review": "面談実施", "consultation_topics": ["生命保険", "医療保険"]},
    {"id": "REV002", "posted_at": datetime(2024, 9, 17, 12, 0), "reviewer_name": "田村恵子",
     "reviewer_type": "エンドユーザー", "fp_id": "FP003", "user_id": "U003", "rating": 4,
     "review_content": "住宅ローンの比較がわかりやすかったです。",
     "status_at_review": "商品提案", "consultation_topics": ["住宅ローン"]},
    {"id": "REV003", "posted_at": datetime(2024, 9, 16, 9, 40), "reviewer_name": "中村健太",
     "reviewer_type": "エンドユーザー", "fp_id": "FP004", "user_id": "U004", "rating": 3,
     "review_content": "もう少し具体的な提案が欲しかったです。",
     "status_at_review": "日程調整", "consultation_topics": ["NISA", "iDeCo"]},
    {"id": "REV004", "posted_at": datetime(2024, 9, 15, 18, 20), "reviewer_name": "運営事務局",
     "reviewer_type": "システム管理者", "fp_id": "FP002", "user_id": None, "rating": 4,
     "review_content": "対応が迅速で、ユーザーからの評価も高いです。",
     "status_at_review": "新規", "consultation_topics": []},
    {"id": "REV005", "posted_at": datetime(2024, 9, 14, 21, 5), "reviewer_name": "清水美香",
     "reviewer_type": "エンドユーザー", "fp_id": "FP007", "user_id": "U007", "rating": 5,
     "review_content": "資産運用の考え方がよく理解できました。",
     "status_at_review": "面談実施", "consultation_topics": ["資産運用"]},
    {"id": "REV006", "posted_at": datetime(2024, 9, 13, 15, 30), "reviewer_name": "森田拓海",
     "reviewer_type": "エンドユーザー", "fp_id": "FP006", "user_id": "U006", "rating": 2,
     "review_content": "連絡が遅く、日程調整に時間がかかりました。",
     "status_at_review": "日程調整", "consultation_topics": ["教育資金"]},
    {"id": "REV007", "posted_at": datetime(2024, 9, 12, 10, 10), "reviewer_name": "坂本真理",
     "reviewer_type": "エンドユーザー", "fp_id": "FP010", "user_id": "U010", "rating": 5,
     "review_content": "ライフプラン表を作っていただき安心しました。",
     "status_at_review": "商品提案", "consultation_topics": ["ライフプラン"]},
    {"id": "REV008", "posted_at": datetime(2024, 9, 10, 16, 45), "reviewer_name": "鈴木一郎",
     "reviewer_type": "エンドユーザー", "fp_id": "FP001", "user_id": "U002", "rating": 4,
     "review_content": "老後資金のシミュレーションが参考になりました。",
     "status_at_review": "新規", "consultation_topics": ["老後資金"]},
]

# 合作伙伴的公司信息与合同
PARTNER_PROFILES: Dict[str, Dict[str, Any]] = {
    "PART001": {"representative_name": "佐藤健一", "phone_number": "03-1234-5678",
                "address": "東京都渋谷区神南1-2-3", "contact_person_name": "鈴木美咲",
                "contact_person_department": "マーケティング部",
                "contract_start": date(2024, 1, 1), "contract_end": date(2024, 12, 31),
                "contract_status": "有効", "referral_fee": 10000},
    "PART002": {"representative_name": "高田誠", "phone_number": "06-2345-6789",
                "address": "大阪府大阪市北区梅田2-4-6", "contact_person_name": "井上愛",
                "contact_person_department": "営業部",
                "contract_start": date(2024, 4, 1), "contract_end": date(2025, 3, 31),
                "contract_status": "有効", "referral_fee": 8000},
    "PART003": {"representative_name": "森本大樹", "phone_number": "052-345-6789",
                "address": "愛知県名古屋市中区栄3-5-7", "contact_person_name": "小川遥",
                "contact_person_department": "提携推進室",
                "contract_start": date(2024, 6, 1), "contract_end": date(2025, 5, 31),
                "contract_status": "有効", "referral_fee": 8000},
    "PART004": {"representative_name": "林直人", "phone_number": "092-456-7890",
                "address": "福岡県福岡市博多区博多駅前1-1-1", "contact_person_name": "林直人",
                "contact_person_department": "代表",
                "contract_start": date(2024, 7, 15), "contract_end": date(2025, 7, 14),
                "contract_status": "有効", "referral_fee": 5000},
    "PART005": {"representative_name": "石田亮", "phone_number": "011-567-8901",
                "address": "北海道札幌市中央区大通西4-6", "contact_person_name": "石田亮",
                "contact_person_department": "代表",
                "contract_start": date(2023, 7, 1), "contract_end": date(2024, 6, 30),
                "contract_status": "期限切れ", "referral_fee": 5000},
}

# FP プロフィール上的自由记述项目
FP_PROFILES: Dict[str, Dict[str, Any]] = {
    "FP001": {"industry_experience": "金融業界15年", "annual_consultations": "120件",
              "contract_counts": "45件", "awards": "MDRT 2023"},
    "FP002": {"industry_experience": "保険業界20年", "annual_consultations": "200件",
              "contract_counts": "80件", "awards": "MDRT COT 2022, 2023"},
    "FP007": {"industry_experience": "証券会社10年", "annual_consultations": "150件",
              "contract_counts": "52件", "awards": ""},
}

FP_CONTRACTS: List[Dict[str, Any]] = [
    {"id": "CON001", "fp_id": "FP001", "contract_start": date(2023, 4, 1),
     "contract_end": date(2024, 3, 31), "plan_name": "基本プラン", "monthly_fee": 45000,
     "contract_status": "無効", "fp_rank": 3},
    {"id": "CON002", "fp_id": "FP001", "contract_start": date(2024, 4, 1),
     "contract_end": date(2025, 3, 31), "renewal_date": date(2024, 3, 15),
     "plan_name": "ビジネスプラン", "monthly_fee": 200000, "contract_status": "有効", "fp_rank": 4},
    {"id": "CON003", "fp_id": "FP002", "contract_start": date(2023, 6, 15),
     "contract_end": date(2025, 6, 14), "plan_name": "エンタープライズプラン",
     "monthly_fee": 750000, "contract_status": "有効", "fp_rank": 5},
    {"id": "CON004", "fp_id": "FP007", "contract_start": date(2024, 3, 18),
     "contract_end": date(2025, 3, 17), "plan_name": "ビジネスプラン", "monthly_fee": 200000,
     "contract_status": "有効", "fp_rank": 5},
]

FP_PAYMENTS: List[Dict[str, Any]] = [
    {"id": "PAY001", "fp_id": "FP001", "invoice_date": date(2024, 7, 1), "period": "2024年7月",
     "fee_type": "月額利用料", "amount": 200000, "payment_status": "支払い済み",
     "payment_date": date(2024, 7, 5), "payment_method": "クレジットカード"},
    {"id": "PAY002", "fp_id": "FP001", "invoice_date": date(2024, 8, 1), "period": "2024年8月",
     "fee_type": "月額利用料", "amount": 200000, "payment_status": "支払い済み",
     "payment_date": date(2024, 8, 5), "payment_method": "クレジットカード"},
    {"id": "PAY003", "fp_id": "FP001", "invoice_date": date(2024, 9, 1), "period": "2024年9月",
     "fee_type": "月額利用料", "amount": 200000, "payment_status": "未払い",
     "payment_method": "銀行振込", "notes": "9月末振込予定"},
    {"id": "PAY004", "fp_id": "FP001", "invoice_date": date(2024, 9, 10), "period": "2024年9月",
     "fee_type": "追加配信料", "amount": 30000, "payment_status": "未払い",
     "payment_method": "クレジットカード"},
    {"id": "PAY005", "fp_id": "FP002", "invoice_date": date(2024, 9, 1), "period": "2024年9月",
     "fee_type": "月額利用料", "amount": 750000, "payment_status": "支払い済み",
     "payment_date": date(2024, 9, 3), "payment_method": "銀行振込"},
]

# (FP, 年, 月, 预定配信, 实际配信, 电话接通, 日程调整, 面谈, 提案, 成约)
FP_PERFORMANCE = [
    ("FP001", 2024, 8, 50, 48, 40, 30, 25, 20, 8),
    ("FP001", 2024, 9, 60, 57, 45, 34, 28, 21, 9),
    ("FP002", 2024, 9, 80, 80, 70, 50, 40, 30, 12),
]

# (ID, 合作伙伴, 接收时间, 用户, 姓名, 年龄, 都道府県, 咨询内容, 审核结果, 驳回方式, 咨询状态)
PARTNER_LEADS = [
    ("LEAD001", "PART001", datetime(2024, 9, 15, 10, 20), "U001", "佐藤花子", 34, "東京都",
     "保険の見直し", "承認済み", None, "面談実施"),
    ("LEAD002", "PART001", datetime(2024, 9, 14, 18, 5), None, "山口修", 67, "千葉県",
     "相続対策", "拒否", "自動", None),
    ("LEAD003", "PART001", datetime(2024, 9, 13, 12, 40), "U004", "中村健太", 29, "神奈川県",
     "資産運用", "承認済み", None, "商品提案"),
    ("LEAD004", "PART001", datetime(2024, 9, 12, 9, 15), None, "木下優", 22, "東京都",
     "重複登録", "拒否", "手動", None),
    ("LEAD005", "PART001", datetime(2024, 9, 11, 20, 30), "U008", "岡田直樹", 41, "埼玉県",
     "住宅ローン", "保留中", None, None),
    ("LEAD006", "PART002", datetime(2024, 9, 10, 15, 0), "U002", "鈴木一郎", 45, "大阪府",
     "老後資金", "承認済み", None, "日程調整"),
    ("LEAD007", "PART002", datetime(2024, 9, 9, 11, 45), None, "テスト太郎", 99, "大阪府",
     "テスト", "拒否", "自動", None),
]

GIFTS: List[Dict[str, Any]] = [
    {"id": "GIFT001", "user_id": "U001", "application_date": date(2024, 9, 16),
     "gift_type": "Amazonギフト券 1,000円", "status": "処理完了", "processed_date": date(2024, 9, 18)},
    {"id": "GIFT002", "user_id": "U001", "application_date": date(2024, 9, 20),
     "gift_type": "スターバックスeGift", "status": "申請中"},
    {"id": "GIFT003", "user_id": "U003", "application_date": date(2024, 9, 10),
     "gift_type": "Amazonギフト券 1,000円", "status": "LINE公式で配信済み",
     "processed_date": date(2024, 9, 12)},
    {"id": "GIFT004", "user_id": "U007", "application_date": date(2024, 9, 14),
     "gift_type": "QUOカードPay 500円", "status": "エラー"},
]

PAYMENT_URLS: List[Dict[str, Any]] = [
    {"id": "URL001", "url_name": "基本プラン初期決済用",
     "url": "https://moneydotcom.jp/link/creditcard/basic-firsttime-payment", "status": "利用中",
     "creation_date": date(2024, 9, 15), "last_payment_date": date(2024, 9, 18), "payment_count": 47,
     "description": "新規顧客向けの基本プラン（月額）の初回決済用のURLです。"
                    "顧客がこのURLから決済を完了すると、自動的にサブスクリプションが開始されます。",
     "amount": 4980},
    {"id": "URL002", "url_name": "ビジネスプラン初期決済用",
     "url": "https://moneydotcom.jp/link/creditcard/business-firsttime-payment", "status": "利用中",
     "creation_date": date(2024, 8, 22), "last_payment_date": date(2024, 9, 17), "payment_count": 23},
    {"id": "URL003", "url_name": "エンタープライズプラン初期決済用",
     "url": "https://moneydotcom.jp/link/creditcard/enterprise-firsttime-payment", "status": "利用中",
     "creation_date": date(2024, 7, 10), "last_payment_date": date(2024, 9, 16), "payment_count": 156},
    {"id": "URL004", "url_name": "テスト決済URL",
     "url": "https://moneydotcom.jp/link/creditcard/test-payment", "status": "停止中",
     "creation_date": date(2024, 6, 5), "last_payment_date": date(2024, 6, 8), "payment_count": 3},
    {"id": "URL005", "url_name": "特別キャンペーン決済",
     "url": "https://moneydotcom.jp/link/creditcard/special-campaign", "status": "停止中",
     "creation_date": date(2024, 5, 20), "last_payment_date": date(2024, 5, 31), "payment_count": 89},
    {"id": "URL006", "url_name": "新規顧客向け決済URL",
     "url": "https://moneydotcom.jp/link/creditcard/new-customer", "status": "利用中",
     "creation_date": date(2024, 4, 15), "last_payment_date": date(2024, 9, 18), "payment_count": 12},
]

SUBSCRIPTION_PLANS: List[Dict[str, Any]] = [
    {"id": "plan_001", "plan_name": "基本プラン", "price": 45000, "billing_cycle": "月間請求",
     "status": "有効", "subscriber_count": 64, "creation_date": date(2025, 9, 22)},
    {"id": "plan_002", "plan_name": "ビジネスプラン", "price": 200000, "billing_cycle": "月間請求",
     "status": "有効", "subscriber_count": 87, "creation_date": date(2025, 9, 22)},
    {"id": "plan_003", "plan_name": "エンタープライズプラン", "price": 750000, "billing_cycle": "月間請求",
     "status": "有効", "subscriber_count": 8, "creation_date": date(2025, 9, 22)},
]

FAQS: List[Dict[str, Any]] = [
    {"id": "FAQ001", "display_order": 1, "category": "サービス基本",
     "question": "サービスの利用料金は？",
     "answer": "サービスのご利用は無料です。ファイナンシャルプランナーとの相談料も一切かかりません。",
     "publication_status": "公開中", "last_updated": date(2024, 9, 15)},
    {"id": "FAQ002", "display_order": 2, "category": "サービス基本",
     "question": "相談できる内容は何ですか？",
     "answer": "ライフプラン、保険、家計、資産運用、老後資金、NISA/iDECOなど、"
               "お金に関する幅広いご相談が可能です。",
     "publication_status": "公開中", "last_updated": date(2024, 9, 14)},
    {"id": "FAQ003", "display_order": 3, "category": "FPとの相談",
     "question": "相談は何回でも無料ですか？",
     "answer": "はい、何度でも無料でご相談いただけます。お客様が納得いくまで、担当のFPがサポートいたします。",
     "publication_status": "公開中", "last_updated": date(2024, 9, 13)},
    {"id": "FAQ004", "display_order": 4, "category": "FPとの相談",
     "question": "オンラインでの相談は可能ですか？",
     "answer": "はい、多くのFPがオンライン相談に対応しております。"
               "ご希望の場合は、マッチング後の日程調整の際にお申し付けください。",
     "publication_status": "公開中", "last_updated": date(2024, 9, 12)},
    {"id": "FAQ005", "display_order": 5, "category": "その他",
     "question": "個人情報の取り扱いはどうなっていますか？",
     "answer": "お客様の個人情報は、プライバシーポリシーに基づき厳重に管理しております。"
               "詳細はプライバシーポリシーのページをご確認ください。",
     "publication_status": "非公開", "last_updated": date(2024, 9, 11)},
]

# 版本履历按上传顺序（旧的在前）
LEGAL_DOCUMENTS: List[Dict[str, Any]] = [
    {"id": "tos", "name": "サービス利用規約", "current_version": "v2.1",
     "last_updated": date(2024, 8, 20), "publication_status": "公開中",
     "versions": [("v1.0", date(2023, 1, 15)), ("v2.0", date(2024, 5, 10)), ("v2.1", date(2024, 8, 20))]},
    {"id": "privacy", "name": "プライバシーポリシー", "current_version": "v1.3",
     "last_updated": date(2024, 7, 15), "publication_status": "公開中",
     "versions": [("v1.0", date(2023, 1, 15)), ("v1.1", date(2023, 6, 20)),
                  ("v1.2", date(2024, 4, 1)), ("v1.3", date(2024, 7, 15))]},
]

BANNERS: List[Dict[str, Any]] = [
    {"id": "BANNER001", "position": 1, "image_url": "https://via.placeholder.com/300x100.png?text=Banner+1",
     "link_url": "https://example.com/product-a", "display_start": date(2024, 9, 1),
     "display_end": date(2024, 10, 31), "publication_status": "公開中", "clicks": 1234},
    {"id": "BANNER002", "position": 2, "image_url": "https://via.placeholder.com/300x100.png?text=Banner+2",
     "link_url": "https://example.com/product-b", "display_start": date(2024, 9, 15),
     "display_end": date(2024, 11, 15), "publication_status": "公開中", "clicks": 876},
    {"id": "BANNER003", "position": 0, "image_url": "https://via.placeholder.com/300x100.png?text=Inactive+Banner",
     "link_url": "https://example.com/product-c", "display_start": date(2024, 8, 1),
     "display_end": date(2024, 8, 31), "publication_status": "非公開", "clicks": 543},
]


def seed_demo_data(db: "DatabaseManager",
                   rng: Optional[random.Random] = None) -> Dict[str, int]:
    """载入演示数据。

    已有数据时跳过（幂等），返回各实体的记录数。

    Args:
        db: 数据库管理器（表已创建）。
        rng: 随机数生成器（可选，默认以 settings.seed_random_seed 初始化）。

    Returns:
        各实体名称到记录数的字典。
    """
    if db.users.count_all() > 0 or db.fps.count_all() > 0:
        logger.info("Seed data already present, skipping")
        return db.record_counts()

    rng = rng or random.Random(settings.seed_random_seed)

    for item in PARTNERS:
        fields = {k: v for k, v in item.items() if k != "urls"}
        urls = [
            PartnerUrl(url=url, generation_date=issued, status=status,
                       leads_count=leads)
            for url, issued, status, leads in item["urls"]
        ]
        db.partners.add(urls=urls, **fields, **PARTNER_PROFILES.get(item["id"], {}))

    for item in FPS:
        db.fps.add(**item, **FP_PROFILES.get(item["id"], {}))

    for item in USERS:
        db.users.add(**item)

    for (hist_id, allocated_at, fp_id, user_id, partner_id,
         allocation_type, method, status) in MATCHING_HISTORY:
        db.matching_history.add(
            id=hist_id, allocated_at=allocated_at, fp_id=fp_id,
            user_id=user_id, partner_id=partner_id,
            allocation_type=allocation_type, allocation_method=method,
            current_status="新規",
            updated_by="システム" if method == "自動マッチング" else "管理者",
        )
        if status != "新規":
            db.matching_history.update_status(
                hist_id, status, updated_by="担当FP",
                changed_at=allocated_at + timedelta(days=1),
            )

    for item in REVIEWS:
        db.reviews.add(**item)

    db.allocations.generate_for_active_fps(rng, today=SEED_REFERENCE_DATE)

    for item in FP_CONTRACTS:
        db.fp_contracts.add(**item)

    for item in FP_PAYMENTS:
        db.fp_payments.add(**item)

    for fp_id, year, month, *counts in FP_PERFORMANCE:
        db.fp_performance.record_month(fp_id, year, month, **dict(zip(FUNNEL_FIELDS, counts)))

    # 直接写入已审核的线索，不计入 URL 的线索数
    for (lead_id, partner_id, received_at, user_id, user_name, age, prefecture,
         content, approval, rejection, consultation) in PARTNER_LEADS:
        db.partner_leads.add(
            id=lead_id, partner_id=partner_id, received_at=received_at,
            user_id=user_id, user_name=user_name, age=age, prefecture=prefecture,
            consultation_content=content, approval_status=approval,
            rejection_type=rejection, consultation_status=consultation,
        )

    for item in GIFTS:
        db.gifts.add(**item)

    for item in PAYMENT_URLS:
        db.payment_urls.add(**item)

    for item in SUBSCRIPTION_PLANS:
        db.plans.add(**item)

    for item in FAQS:
        db.faqs.add(**item)

    for item in LEGAL_DOCUMENTS:
        fields = {k: v for k, v in item.items() if k != "versions"}
        prefix = item["id"]
        versions = [
            LegalDocumentVersion(
                version=version, upload_date=uploaded,
                file_name=f"{prefix}_{version}.pdf",
                file_url=f"/docs/{prefix}_{version}.pdf",
            )
            for version, uploaded in item["versions"]
        ]
        db.legal_documents.add(versions=versions, **fields)

    for item in BANNERS:
        db.banners.add(**item)

    counts = db.record_counts()
    logger.info(f"Seed data loaded: {counts}")
    return counts
