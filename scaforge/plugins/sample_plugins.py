"""Sample plugin manifests used to seed the default catalog."""

from typing import List, Literal

from pydantic import BaseModel

from scaforge.plugins.manifest import (
    FrameworkTarget,
    PluginCategory,
    PluginFile,
    PluginIntegration,
    PluginManifest,
    PydanticConfigSchema,
)

ALL_TARGETS = list(FrameworkTarget)
REACT_TARGETS = [FrameworkTarget.NEXTJS, FrameworkTarget.TANSTACK]


class TrpcOptions(BaseModel):
    batching: bool = True
    transformer: Literal["superjson", "none"] = "superjson"
    enable_subscriptions: bool = False


class ClerkOptions(BaseModel):
    theme: Literal["light", "dark", "auto"] = "light"
    sign_in_url: str = "/sign-in"
    redirect_url: str = "/dashboard"


class PrismaOptions(BaseModel):
    provider: Literal["postgresql", "mysql", "sqlite", "mongodb"] = "postgresql"


api_trpc = PluginManifest(
    name="api-trpc",
    display_name="tRPC",
    category=PluginCategory.API,
    description="End-to-end typesafe APIs with tRPC",
    supported_targets=[FrameworkTarget.NEXTJS, FrameworkTarget.TANSTACK, FrameworkTarget.NUXT],
    conflicts=["api-apollo", "api-yoga"],
    config_schema=PydanticConfigSchema(TrpcOptions),
    post_install="Create your routers in src/server/trpc/routers/",
)

api_apollo = PluginManifest(
    name="api-apollo",
    display_name="Apollo GraphQL",
    category=PluginCategory.API,
    description="GraphQL API with Apollo Server",
    supported_targets=[FrameworkTarget.NEXTJS, FrameworkTarget.TANSTACK, FrameworkTarget.NUXT],
    conflicts=["api-trpc", "api-yoga"],
)

api_yoga = PluginManifest(
    name="api-yoga",
    display_name="GraphQL Yoga",
    category=PluginCategory.API,
    description="GraphQL server with GraphQL Yoga",
    supported_targets=ALL_TARGETS,
    conflicts=["api-trpc", "api-apollo"],
)

auth_clerk = PluginManifest(
    name="auth-clerk",
    display_name="Clerk",
    category=PluginCategory.AUTH,
    description="Complete authentication solution with Clerk",
    supported_targets=[FrameworkTarget.NEXTJS, FrameworkTarget.TANSTACK, FrameworkTarget.NUXT],
    conflicts=["auth-authjs", "auth-better"],
    config_schema=PydanticConfigSchema(ClerkOptions),
    integrations=[
        PluginIntegration(
            plugin="api-trpc",
            type="middleware",
            files=[PluginFile(path="src/server/trpc/context.ts", overwrite=True)],
        ),
    ],
    post_install="Add your Clerk keys to .env.local and wrap your app with ClerkProvider",
)

auth_authjs = PluginManifest(
    name="auth-authjs",
    display_name="Auth.js",
    category=PluginCategory.AUTH,
    description="Authentication with Auth.js (NextAuth)",
    supported_targets=[FrameworkTarget.NEXTJS],
    conflicts=["auth-clerk", "auth-better"],
    integrations=[
        PluginIntegration(
            plugin="db-prisma",
            type="adapter",
            files=[PluginFile(path="src/lib/auth/adapter.ts")],
        ),
    ],
)

auth_better = PluginManifest(
    name="auth-better",
    display_name="Better Auth",
    category=PluginCategory.AUTH,
    description="Framework-agnostic authentication with Better Auth",
    supported_targets=ALL_TARGETS,
    dependencies=["db-drizzle"],
    conflicts=["auth-clerk", "auth-authjs"],
)

db_prisma = PluginManifest(
    name="db-prisma",
    display_name="Prisma",
    category=PluginCategory.DATABASE,
    description="Type-safe database client with Prisma",
    supported_targets=ALL_TARGETS,
    conflicts=["db-drizzle"],
    config_schema=PydanticConfigSchema(PrismaOptions),
    integrations=[
        PluginIntegration(
            plugin="api-trpc",
            type="context",
            files=[
                PluginFile(path="src/server/trpc/context/db.ts"),
                PluginFile(path="src/server/trpc/routers/auth.ts", condition=["auth-authjs"]),
            ],
        ),
    ],
)

db_drizzle = PluginManifest(
    name="db-drizzle",
    display_name="Drizzle ORM",
    category=PluginCategory.DATABASE,
    description="Lightweight TypeScript ORM with Drizzle",
    supported_targets=ALL_TARGETS,
    conflicts=["db-prisma"],
)

cms_sanity = PluginManifest(
    name="cms-sanity",
    display_name="Sanity",
    category=PluginCategory.CMS,
    description="Headless CMS with Sanity",
    supported_targets=[FrameworkTarget.NEXTJS, FrameworkTarget.TANSTACK, FrameworkTarget.NUXT],
)

cache_upstash = PluginManifest(
    name="cache-upstash",
    display_name="Upstash Redis",
    category=PluginCategory.CACHING,
    description="Serverless Redis caching with Upstash",
    supported_targets=ALL_TARGETS,
)

email_resend = PluginManifest(
    name="email-resend",
    display_name="Resend",
    category=PluginCategory.EMAIL,
    description="Transactional email with Resend",
    supported_targets=ALL_TARGETS,
)

analytics_posthog = PluginManifest(
    name="analytics-posthog",
    display_name="PostHog",
    category=PluginCategory.ANALYTICS,
    description="Product analytics with PostHog",
    supported_targets=REACT_TARGETS,
    integrations=[
        PluginIntegration(
            plugin="api-trpc",
            type="hook",
            files=[PluginFile(path="src/server/trpc/middleware/analytics.ts")],
        ),
    ],
)

sample_plugins: List[PluginManifest] = [
    api_trpc,
    api_apollo,
    api_yoga,
    auth_clerk,
    auth_authjs,
    auth_better,
    db_prisma,
    db_drizzle,
    cms_sanity,
    cache_upstash,
    email_resend,
    analytics_posthog,
]
