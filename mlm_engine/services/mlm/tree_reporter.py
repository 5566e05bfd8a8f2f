"""
Referral tree reporting module.

Builds a bounded view of the referral graph below any user.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.config.settings import settings
from mlm_engine.models.user import User
from mlm_engine.repositories.user_repository import UserRepository
from mlm_engine.services.base_service import BaseService, log_operation
from mlm_engine.services.mlm.statistics import CommissionReportService
from mlm_engine.services.mlm.types import ReferralTree, TreeNode
from mlm_engine.utils.exceptions import UserNotFoundError


class ReferralTreeReporter(BaseService):
    """
    Builds referral trees for reporting.

    Work is bounded by O(per ** depth) nodes: depth is clamped to
    [0, TREE_MAX_DEPTH] and per to [1, TREE_MAX_CHILDREN].
    """

    def __init__(
        self,
        session: AsyncSession,
        max_depth: int | None = None,
        max_children: int | None = None,
    ) -> None:
        """
        Initialize tree reporter.

        Args:
            session: Async database session
            max_depth: Hard depth cap (default: TREE_MAX_DEPTH)
            max_children: Hard fan-out cap (default: TREE_MAX_CHILDREN)
        """
        super().__init__(session)
        self.max_depth = (
            settings.tree_max_depth if max_depth is None else max_depth
        )
        self.max_children = (
            settings.tree_max_children if max_children is None else max_children
        )
        self.user_repo = UserRepository(session)
        self.report_service = CommissionReportService(session)

    @log_operation
    async def build_tree(
        self,
        root_identifier: str | int,
        depth: int | None = None,
        per: int | None = None,
        include_totals: bool = True,
    ) -> ReferralTree:
        """
        Build the referral tree below a user.

        Args:
            root_identifier: User ID, referral code or email
            depth: Levels of children to expand
            per: Max children expanded per node (newest first)
            include_totals: Attach commission totals to every node

        Returns:
            ReferralTree with the bounds actually applied

        Raises:
            UserNotFoundError: If the identifier matches no user
        """
        depth = self._clamp_depth(depth)
        per = self._clamp_per(per)

        root = await self.user_repo.resolve_by_identifier(root_identifier)
        if root is None:
            raise UserNotFoundError(root_identifier)

        node = await self._build_node(root, depth, per, include_totals)

        self.logger.debug(
            "Referral tree built",
            extra={
                "root_id": root.id,
                "depth": depth,
                "per": per,
                "include_totals": include_totals,
            },
        )

        return ReferralTree(
            root=node, depth=depth, per=per, include_totals=include_totals
        )

    async def _build_node(
        self,
        user: User,
        depth: int,
        per: int,
        include_totals: bool,
    ) -> TreeNode:
        """Build one node and expand its children depth-first."""
        node = TreeNode(
            id=user.id,
            name=user.name,
            email=user.email,
            referral_code=user.referral_code,
            avatar=user.avatar_url,
            mlm_active=user.mlm_active,
            referred_at=user.referred_at,
        )
        node.children_count = await self.user_repo.count_direct_children(
            user.id
        )
        if include_totals:
            node.totals = await self.report_service.totals_by_status(user.id)

        if depth <= 0 or node.children_count == 0:
            return node

        children = await self.user_repo.get_direct_children(
            user.id, limit=per, newest_first=True
        )
        for child in children:
            node.children.append(
                await self._build_node(child, depth - 1, per, include_totals)
            )

        return node

    def _clamp_depth(self, depth: int | None) -> int:
        if depth is None:
            depth = settings.tree_default_depth
        return max(0, min(self.max_depth, int(depth)))

    def _clamp_per(self, per: int | None) -> int:
        if per is None:
            per = settings.tree_default_children
        return max(1, min(self.max_children, int(per)))
