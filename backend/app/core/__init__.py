"""
核心模块包 (Core Module Package)

反馈服务的基础组件：配置管理、数据库连接、持久化访问层、安全凭证、授权守卫、依赖注入和后台调度。

Foundational components of the feedback service: configuration, database
connections, the persistence access layer, credentials, the authorization guard,
dependency injection and background scheduling.
"""
