"""site_harvest.crawler: обход сайта, загрузка страниц и фильтрация ссылок."""
