"""
管理コンソール配置接口 - 支持可替换的词汇表与菜单配置

新项目可以实现自己的配置，替换默认配置。
枚举字面量在表单边界做运行时校验，这里集中定义各字段允许的取值。
"""
from abc import ABC, abstractmethod
from typing import List, Dict, Tuple


# “不过滤”哨兵值（不同画面的下拉框写法不一致）
ALL_SENTINELS: Tuple[str, ...] = ("全て", "すべて", "")

# ---------- 枚举字面量 ----------
FP_TYPES = ("個人", "法人")
FP_STATUSES = ("活動中", "停止中")
FP_ROLES = ("一般", "管理者")
LINE_STATUSES = ("連携済み", "未連携")
VERIFICATION_STATUSES = ("認証済み", "未認証")
PARTNER_STATUSES = ("アクティブ", "停止中")
PARTNER_URL_STATUSES = ("利用中", "停止済み")
ALLOCATION_TYPES = ("基本割当", "追加配信依頼")
ALLOCATION_STATUSES = ("未完了", "完了")
ALLOCATION_METHODS = ("自動マッチング", "手動割当")
CONSULTATION_STATUSES = ("新規", "日程調整", "面談実施", "商品提案", "契約", "保留", "失注")
CLOSED_CONSULTATION_STATUSES = ("契約", "失注", "保留")
REVIEWER_TYPES = ("エンドユーザー", "システム管理者")
REVIEW_STATUSES = ("新規", "日程調整", "面談実施", "商品提案", "契約")
PAYMENT_URL_STATUSES = ("利用中", "停止中")
PLAN_STATUSES = ("有効", "無効")
BILLING_CYCLES = ("月間請求", "年間請求")
PUBLICATION_STATUSES = ("公開中", "非公開")
PARTNER_CONTRACT_STATUSES = ("有効", "無効", "期限切れ")
LEAD_APPROVAL_STATUSES = ("承認済み", "拒否", "保留中")
LEAD_REJECTION_TYPES = ("自動", "手動")
FP_CONTRACT_STATUSES = ("有効", "無効")
FP_PAYMENT_STATUSES = ("支払い済み", "未払い")
FP_PAYMENT_METHODS = ("クレジットカード", "銀行振込")
GIFT_STATUSES = ("申請中", "処理完了", "LINE公式で配信済み", "エラー")
# 礼品申请处理完成（记录处理日期）的状态
GIFT_DONE_STATUSES = ("処理完了", "LINE公式で配信済み")


class ConsoleConfig(ABC):
    """管理コンソール配置抽象基类"""

    @abstractmethod
    def get_menu_sections(self) -> List[Dict[str, str]]:
        """获取侧边栏菜单（id / name）"""
        pass

    @abstractmethod
    def get_banner_slots(self) -> List[int]:
        """获取广告位编号列表"""
        pass

    @abstractmethod
    def get_faq_categories(self) -> List[str]:
        """获取 FAQ 分类"""
        pass

    @abstractmethod
    def get_prefectures(self) -> List[str]:
        """获取都道府县列表"""
        pass


class FPMatchingConsoleConfig(ConsoleConfig):
    """FP 匹配服务的默认配置"""

    def get_menu_sections(self) -> List[Dict[str, str]]:
        return [
            {"id": "dashboard", "name": "ダッシュボード"},
            {"id": "users", "name": "ユーザー管理"},
            {"id": "fp", "name": "FP管理"},
            {"id": "matching", "name": "マッチング・割当管理"},
            {"id": "partners", "name": "パートナー管理"},
            {"id": "reviews", "name": "レビュー管理"},
            {"id": "content", "name": "コンテンツ管理"},
            {"id": "finance", "name": "財務管理"},
            {"id": "system", "name": "システム設定"},
        ]

    def get_banner_slots(self) -> List[int]:
        return [1, 2, 3]

    def get_faq_categories(self) -> List[str]:
        return ["サービス基本", "FPとの相談", "その他"]

    def get_prefectures(self) -> List[str]:
        return [
            "北海道", "青森県", "岩手県", "宮城県", "秋田県", "山形県", "福島県",
            "茨城県", "栃木県", "群馬県", "埼玉県", "千葉県", "東京都", "神奈川県",
            "新潟県", "富山県", "石川県", "福井県", "山梨県", "長野県", "岐阜県",
            "静岡県", "愛知県", "三重県", "滋賀県", "京都府", "大阪府", "兵庫県",
            "奈良県", "和歌山県", "鳥取県", "島根県", "岡山県", "広島県", "山口県",
            "徳島県", "香川県", "愛媛県", "高知県", "福岡県", "佐賀県", "長崎県",
            "熊本県", "大分県", "宮崎県", "鹿児島県", "沖縄県",
        ]


# 全局配置实例（可以在 app.py 中替换）
console_config: ConsoleConfig = FPMatchingConsoleConfig()
