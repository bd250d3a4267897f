"""
服務層

這個 package 包含 core 依賴的外部協作者，不負責授權：
- TeamDirectory：隊伍查詢與成員管理
- UserDirectory：使用者註冊與查詢
- EventService：解析目前活動
"""
