# Models package - imported by init_db so every table is registered
from formai.models.user import User, Organization, OrganizationMember
from formai.models.token import RefreshToken
from formai.models.forum import Forum, DomainVerification, Category
from formai.models.persona import AIPersona
from formai.models.question import Question, Answer, Vote
from formai.models.interlink import MainSitePage, ContentInterlink
from formai.models.seo import TrackedKeyword, KeywordRanking
from formai.models.competitor import Competitor
from formai.models.lead import LeadForm, LeadSubmission, LeadFormView
from formai.models.gated import GatedContent
from formai.models.analytics import AnalyticsEvent
from formai.models.privacy import ConsentRecord, DataExport
from formai.models.activity import ActivityLog
