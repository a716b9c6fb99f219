"""核心领域层: 包标识、清单、缓存、解析与 hook 条件"""
