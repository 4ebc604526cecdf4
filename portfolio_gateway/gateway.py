"""
ProfileDataGateway: the single entry point UI code talks to.

Every operation reads the cached user id from the injected SessionService,
talks to Supabase in a fixed sequential order and returns either an
OperationResult (mutations) or a plain value that is empty on failure
(reads).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .auth.session import AuthError, SupabaseAuth
from .config.config_manager import (
    PORTFOLIO_PATH,
    GatewayConfig,
    create_supabase_client,
    load_config,
)
from .services.cv_export_service import CVExportService, Viewer
from .services.errors import NotAuthenticatedError
from .services.outcome import OperationResult, guarded, quiet
from .services.portfolio_link_service import PortfolioLinkService, random_suffix
from .services.profile_service import ProfileService
from .services.records_service import (
    ASSESSMENTS,
    CERTIFICATES,
    PROJECTS,
    RecordsService,
)
from .services.session_service import SessionService

logger = logging.getLogger(__name__)


@dataclass
class LoginStatus:
    logged_in: bool
    user: Optional[Dict[str, Any]] = None


class ProfileDataGateway:
    """Facade over Supabase auth and the profile/project/certificate/assessment tables."""

    def __init__(
        self,
        client: Any,
        *,
        session: Optional[SessionService] = None,
        config: Optional[GatewayConfig] = None,
        viewer: Optional[Viewer] = None,
        suffix_fn: Callable[[], str] = random_suffix,
    ) -> None:
        self.client = client
        self.config = config or GatewayConfig(session_path=None)
        self.session = session or SessionService(self.config.session_path)
        self.auth = SupabaseAuth(client)
        self.profiles = ProfileService(client)
        self.projects = RecordsService(client, PROJECTS)
        self.certificates = RecordsService(client, CERTIFICATES)
        self.assessments = RecordsService(client, ASSESSMENTS)
        self.links = PortfolioLinkService(
            client, self.config.origin, PORTFOLIO_PATH, suffix_fn=suffix_fn
        )
        self.cv_export = CVExportService(
            client, export_dir=self.config.export_dir, viewer=viewer
        )
        self._restore_session()

    @classmethod
    def from_env(cls, **kwargs: Any) -> "ProfileDataGateway":
        """Build a gateway from SUPABASE_* / PORTFOLIO_* environment variables."""
        config = load_config()
        client = create_supabase_client(config)
        return cls(client, config=config, **kwargs)

    # --- session helpers ---------------------------------------------------------

    def _restore_session(self) -> None:
        tokens = self.session.get_tokens()
        if not tokens:
            return
        try:
            self.auth.restore(*tokens)
        except AuthError as exc:
            logger.warning(f"Saved session could not be restored: {exc.message}")
            self.session.clear_tokens()
            return
        self._save_tokens()

    def _save_tokens(self) -> None:
        """Store the tokens the client holds now, so the next process can restore them."""
        try:
            current = self.auth.current_session()
        except Exception as exc:
            logger.warning(f"Unable to read the current auth session: {exc}")
            return
        if current and current.access_token:
            self.session.persist_session(current.user_id, current.access_token, current.refresh_token)

    def _require_user_id(self) -> str:
        user_id = self.session.get_user_id()
        if not user_id:
            raise NotAuthenticatedError()
        return user_id

    def _require_profile(self, columns: str = "id") -> Dict[str, Any]:
        return self.profiles.require_profile(self._require_user_id(), columns)

    def _owner_filter(self) -> Any:
        """Profile id that update/delete must match, or None when ownership is not enforced."""
        if not self.config.enforce_ownership:
            return None
        return self._require_profile()["id"]

    # --- auth --------------------------------------------------------------------

    @guarded("register")
    def register(self, email: str, password: str, full_name: str) -> OperationResult:
        # No rollback: a failed profile insert leaves the auth account in place.
        account = self.auth.signup(email, password)
        self.profiles.create_profile(account.user_id, email, full_name)
        return OperationResult.ok()

    @guarded("login")
    def login(self, email: str, password: str) -> OperationResult:
        account = self.auth.login(email, password)
        self.session.persist_session(account.user_id, account.access_token, account.refresh_token)
        return OperationResult.ok()

    def check_login(self) -> LoginStatus:
        try:
            user = self.auth.current_user()
        except Exception as exc:
            logger.error(f"check_login failed: {exc}")
            return LoginStatus(logged_in=False)
        if not user:
            return LoginStatus(logged_in=False)
        self.session.persist_user_id(str(user["id"]))
        self._save_tokens()
        return LoginStatus(logged_in=True, user=user)

    @guarded("logout")
    def logout(self) -> OperationResult:
        self.auth.logout()
        self.session.clear_session()
        return OperationResult.ok()

    # --- profile -----------------------------------------------------------------

    @quiet("get_profile", default=lambda: None)
    def get_profile(self) -> Optional[Dict[str, Any]]:
        return self.profiles.find_profile(self._require_user_id())

    @guarded("update_profile")
    def update_profile(
        self,
        full_name: Optional[str],
        phone: Optional[str],
        bio: Optional[str],
        skills: Optional[List[str]] = None,
        interests: Optional[List[str]] = None,
    ) -> OperationResult:
        profile = self._require_profile()
        self.profiles.update_profile(
            profile["id"],
            full_name=full_name,
            phone=phone,
            bio=bio,
            skills=skills or [],
            interests=interests or [],
        )
        return OperationResult.ok()

    # --- projects ----------------------------------------------------------------

    @guarded("add_project")
    def add_project(
        self,
        title: str,
        description: Optional[str],
        project_type: Optional[str],
        demo_link: Optional[str] = None,
    ) -> OperationResult:
        profile = self._require_profile()
        self.projects.add(profile["id"], {
            "title": title,
            "description": description,
            "project_type": project_type,
            "demo_link": demo_link,
        })
        return OperationResult.ok()

    @quiet("get_projects", default=list)
    def get_projects(self) -> List[Dict[str, Any]]:
        return self.projects.list_for_profile(self._require_profile()["id"])

    @guarded("update_project")
    def update_project(
        self,
        project_id: Any,
        title: str,
        description: Optional[str],
        project_type: Optional[str],
        demo_link: Optional[str] = None,
    ) -> OperationResult:
        self.projects.update(
            project_id,
            {
                "title": title,
                "description": description,
                "project_type": project_type,
                "demo_link": demo_link,
            },
            profile_id=self._owner_filter(),
        )
        return OperationResult.ok()

    @guarded("delete_project")
    def delete_project(self, project_id: Any) -> OperationResult:
        self.projects.delete(project_id, profile_id=self._owner_filter())
        return OperationResult.ok()

    # --- certificates ------------------------------------------------------------

    @guarded("add_certificate")
    def add_certificate(
        self,
        name: str,
        issuer: Optional[str],
        issued_date: Optional[str] = None,
        file_url: Optional[str] = None,
    ) -> OperationResult:
        profile = self._require_profile()
        self.certificates.add(profile["id"], {
            "name": name,
            "issuer": issuer,
            "issued_date": issued_date,
            "file_url": file_url,
        })
        return OperationResult.ok()

    @quiet("get_certificates", default=list)
    def get_certificates(self) -> List[Dict[str, Any]]:
        return self.certificates.list_for_profile(self._require_profile()["id"])

    @guarded("delete_certificate")
    def delete_certificate(self, certificate_id: Any) -> OperationResult:
        self.certificates.delete(certificate_id, profile_id=self._owner_filter())
        return OperationResult.ok()

    # --- assessments -------------------------------------------------------------

    @guarded("add_assessment")
    def add_assessment(self, skill_name: str, score: float, evaluator: str = "") -> OperationResult:
        profile = self._require_profile()
        self.assessments.add(profile["id"], {
            "skill_name": skill_name,
            "score": score,
            "evaluator": evaluator,
        })
        return OperationResult.ok()

    @quiet("get_assessments", default=list)
    def get_assessments(self) -> List[Dict[str, Any]]:
        return self.assessments.list_for_profile(self._require_profile()["id"])

    @guarded("delete_assessment")
    def delete_assessment(self, assessment_id: Any) -> OperationResult:
        self.assessments.delete(assessment_id, profile_id=self._owner_filter())
        return OperationResult.ok()

    # --- sharing and export ------------------------------------------------------

    @guarded("create_portfolio_link")
    def create_portfolio_link(self) -> OperationResult:
        profile = self._require_profile("id, full_name")
        link = self.links.create_link(profile["id"], profile.get("full_name"))
        return OperationResult.ok(url=link["url"], slug=link["slug"])

    @guarded("generate_cv")
    def generate_cv(self) -> OperationResult:
        # Fixed order: profile, projects, certificates, assessments, then the audit row.
        profile = self._require_profile("*")
        projects = self.get_projects()
        certificates = self.get_certificates()
        assessments = self.get_assessments()
        exported = self.cv_export.export(profile, projects, certificates, assessments)
        return OperationResult.ok(html=exported["html"], path=str(exported["path"]))
