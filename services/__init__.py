"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- StatsService：投票統計（平均、眾數、分布）
- GroupingService：依 parent（epic）分組排序 tickets
- SummaryService：session summary / 報告內容
- NamingService：房間代碼與 ID 生成
- CsvService：CSV 匯入匯出
"""
