"""内容仓库 - FAQ、法律文档、广告横幅的数据访问层。

管理面向终端用户展示的内容数据。
文件并不真正上传：上传操作只记录文件名并虚构一个本地引用路径。
"""
from typing import Optional, List, Dict, Any
from datetime import date
from sqlalchemy import func
from sqlalchemy.orm import Session
from loguru import logger

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import FAQItem, LegalDocument, LegalDocumentVersion, AdBanner
from config.console_config import console_config

DEFAULT_BANNER_IMAGE = "https://via.placeholder.com/300x100.png?text=New+Banner"


class FAQRepository(BaseCRUD):
    """FAQ 仓库。

    新建的 FAQ 追加在末尾（display_order = 当前最大值 + 1）。
    """

    model = FAQItem
    id_prefix = "FAQ"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def ordered(self, session: Optional[Session] = None) -> List[FAQItem]:
        """按显示顺序获取全部 FAQ。"""
        return self._run(
            lambda sess: sess.query(FAQItem).order_by(
                FAQItem.display_order, FAQItem.id
            ).all(),
            session,
        )

    def next_display_order(self, session: Optional[Session] = None) -> int:
        def _query(sess):
            current = sess.query(func.max(FAQItem.display_order)).scalar()
            return (current or 0) + 1

        return self._run(_query, session)

    def add(self, session: Optional[Session] = None, **fields: Any) -> FAQItem:
        def _do(sess):
            if not fields.get("display_order"):
                fields["display_order"] = self.next_display_order(session=sess)
            fields.setdefault("last_updated", date.today())
            return super(FAQRepository, self).add(session=sess, **fields)

        return self._run(_do, session, commit=True)

    def update(self, record_id: str, session: Optional[Session] = None,
               **fields: Any) -> Optional[FAQItem]:
        fields.setdefault("last_updated", date.today())
        return super().update(record_id, session=session, **fields)

    def move(self, faq_id: str, new_order: int,
             session: Optional[Session] = None) -> List[FAQItem]:
        """把 FAQ 移动到 new_order（1 起算），其余 FAQ 依次重新编号。

        超出范围的位置会被夹到首尾。

        Returns:
            重新编号后的 FAQ 列表。

        Raises:
            NotFoundError: FAQ 不存在。
        """
        def _do(sess):
            target = self.require(faq_id, session=sess)
            items = [f for f in self.ordered(session=sess) if f.id != faq_id]
            position = min(max(new_order, 1), len(items) + 1)
            items.insert(position - 1, target)
            for index, item in enumerate(items, start=1):
                item.display_order = index
            sess.flush()
            return items

        items = self._run(_do, session, commit=True)
        logger.info(f"FAQ {faq_id} moved to position {new_order}")
        return items


class LegalDocumentRepository(BaseCRUD):
    """法律文档 仓库。

    管理利用規約、プライバシーポリシー等文档及其版本履历。
    文档 ID 可以显式指定（如 ``tos``），否则自动分配 ``DOC`` 前缀 ID。
    """

    model = LegalDocument
    id_prefix = "DOC"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def history(self, doc_id: str,
                session: Optional[Session] = None
                ) -> List[LegalDocumentVersion]:
        """获取版本履历（新的在前）。

        Raises:
            NotFoundError: 文档不存在。
        """
        def _query(sess):
            self.require(doc_id, session=sess)
            return sess.query(LegalDocumentVersion).filter(
                LegalDocumentVersion.document_id == doc_id
            ).order_by(LegalDocumentVersion.id.desc()).all()

        return self._run(_query, session)

    def upload_version(self, doc_id: str, version: str, file_name: str,
                       today: Optional[date] = None,
                       session: Optional[Session] = None
                       ) -> LegalDocumentVersion:
        """登记新版本并设为当前版本。

        Args:
            doc_id: 文档ID。
            version: 版本号，如 ``v2.2``。
            file_name: 文件名，引用路径为 ``/docs/<file_name>``。
            today: 上传日期（可选，默认今天）。

        Returns:
            新的 LegalDocumentVersion 对象。

        Raises:
            NotFoundError: 文档不存在。
            ValueError: 版本号已存在。
        """
        today = today or date.today()

        def _do(sess):
            doc = self.require(doc_id, session=sess)
            if any(v.version == version for v in doc.versions):
                raise ValueError(
                    f"Version {version} already exists for {doc_id}"
                )
            entry = LegalDocumentVersion(
                document=doc,
                version=version,
                upload_date=today,
                file_name=file_name,
                file_url=f"/docs/{file_name}",
            )
            sess.add(entry)
            doc.current_version = version
            doc.last_updated = today
            sess.flush()
            sess.refresh(entry)
            return entry

        entry = self._run(_do, session, commit=True)
        logger.info(f"Legal document {doc_id} uploaded: {version}")
        return entry


class BannerRepository(BaseCRUD):
    """广告横幅 仓库。

    每个广告位（1〜3）最多只放一个横幅：把横幅放到已占用的广告位时，
    原来的横幅被移出（position = 0）。
    """

    model = AdBanner
    id_prefix = "BANNER"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def _vacate(self, position: Optional[int], keep_id: Optional[str],
                sess: Session) -> None:
        if not position:
            return
        occupants = sess.query(AdBanner).filter(
            AdBanner.position == position
        ).all()
        for banner in occupants:
            if banner.id != keep_id:
                banner.position = 0
                logger.info(
                    f"Banner {banner.id} removed from slot {position}"
                )
        sess.flush()

    @staticmethod
    def _image_reference(file_name: str) -> str:
        return f"/uploads/banners/{file_name}"

    def add(self, session: Optional[Session] = None,
            image_file_name: Optional[str] = None,
            **fields: Any) -> AdBanner:
        """新建横幅。

        Args:
            image_file_name: 选择的图片文件名（可选），只生成本地引用路径。
            **fields: 其余字段。
        """
        def _do(sess):
            self._vacate(fields.get("position"), None, sess)
            if image_file_name:
                fields["image_url"] = self._image_reference(image_file_name)
            fields.setdefault("image_url", DEFAULT_BANNER_IMAGE)
            fields.setdefault("clicks", 0)
            return super(BannerRepository, self).add(session=sess, **fields)

        return self._run(_do, session, commit=True)

    def update(self, record_id: str, session: Optional[Session] = None,
               image_file_name: Optional[str] = None,
               **fields: Any) -> Optional[AdBanner]:
        def _do(sess):
            if self.get(record_id, session=sess) is None:
                return None
            if "position" in fields:
                self._vacate(fields["position"], record_id, sess)
            if image_file_name:
                fields["image_url"] = self._image_reference(image_file_name)
            return super(BannerRepository, self).update(
                record_id, session=sess, **fields
            )

        return self._run(_do, session, commit=True)

    def slots(self, session: Optional[Session] = None
              ) -> Dict[int, Optional[AdBanner]]:
        """获取各广告位上的横幅，空位为 None。"""
        def _query(sess):
            placed = sess.query(AdBanner).filter(
                AdBanner.position > 0
            ).order_by(AdBanner.id).all()
            result = {}
            for slot in console_config.get_banner_slots():
                result[slot] = next(
                    (b for b in placed if b.position == slot), None
                )
            return result

        return self._run(_query, session)

    def ordered(self, session: Optional[Session] = None) -> List[AdBanner]:
        """公开中的在前，再按广告位排序（0 视为最后）。"""
        banners = self.get_all(AdBanner, session=session)
        return sorted(
            banners,
            key=lambda b: (
                b.publication_status != "公開中",
                b.position or 99,
                b.id,
            ),
        )

    def record_click(self, banner_id: str,
                     session: Optional[Session] = None) -> Optional[AdBanner]:
        def _do(sess):
            banner = self.get(banner_id, session=sess)
            if banner is not None:
                banner.clicks = (banner.clicks or 0) + 1
                sess.flush()
            return banner

        return self._run(_do, session, commit=True)
